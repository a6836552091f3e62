"""Operation processors.

Processors are looked up by name in an explicit registry, instead of importing
whatever dotted path happens to be configured. Register custom processors with:

.. code-block:: python

    @register_processor("myapp.BookProcessor")
    class BookProcessor(Processor):
        def find(self):
            ...
"""
from __future__ import annotations

from jsonapi_resources.exceptions import UnknownProcessorError

_registry: dict[str, type[Processor]] = {}


def register_processor(name=None):
    """Class decorator to register a processor.
    Without a name, the dotted path of the class is used.
    """

    def _dec(processor_class):
        key = name or f"{processor_class.__module__}.{processor_class.__qualname__}"
        _registry[key] = processor_class
        return processor_class

    return _dec


def processor_for(name) -> type[Processor]:
    try:
        return _registry[name]
    except (KeyError, TypeError):
        raise UnknownProcessorError(name) from None


@register_processor()
class Processor:
    """Runs a single operation for a resource.

    The ``operation_type`` selects which method handles the operation,
    e.g. ``"find"`` or ``"create_resource"``.
    """

    def __init__(self, resource_class, operation_type, params=None):
        self.resource_class = resource_class
        self.operation_type = operation_type
        self.params = params or {}

    def process(self):
        name = self.operation_type
        handler = getattr(self, name, None)
        if name.startswith("_") or name == "process" or not callable(handler):
            raise ValueError(
                f"{self.__class__.__name__} does not support the operation "
                f"{self.operation_type!r}"
            )
        return handler()
