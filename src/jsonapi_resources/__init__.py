"""Configuration of the JSON:API resources library for Django-Rest-Framework.

.. note::
    JSON:API is a specification for building API's in JSON: https://jsonapi.org/

Implemented bits:

* A :class:`~jsonapi_resources.configuration.Configuration` with all library settings,
  loaded from the ``JSONAPI_RESOURCES`` Django setting.
* Key and route formatters (``underscored``, ``camelized``, ``dasherized`` or custom),
  which are cached per thread.
* An allowlist of exceptions that should not be rescued by the exception handler.
* A registry of operation processors.

Activate the exception handler in the project settings:

.. code-block:: python

    REST_FRAMEWORK = dict(
        EXCEPTION_HANDLER="jsonapi_resources.views.exception_handler",
    )

    JSONAPI_RESOURCES = {
        "KEY_FORMAT": "camelized",
        "ROUTE_FORMAT": "dasherized",
        "EXCEPTION_CLASS_ALLOWLIST": ["myapp.exceptions.NotAuthorizedError"],
    }

The application bootstrap can also change settings from code:

.. code-block:: python

    from jsonapi_resources.settings import configure

    configure(default_page_size=25, maximum_page_size=100)
"""
