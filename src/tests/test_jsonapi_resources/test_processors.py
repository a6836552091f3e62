import pytest

from jsonapi_resources import processors
from jsonapi_resources.exceptions import UnknownProcessorError
from jsonapi_resources.processors import Processor, processor_for, register_processor


@pytest.fixture()
def registry(monkeypatch):
    """Keep the processors that tests register out of the global registry."""
    monkeypatch.setattr(processors, "_registry", processors._registry.copy())
    return processors._registry


class TestRegistry:
    def test_default_processor(self):
        assert processor_for("jsonapi_resources.processors.Processor") is Processor

    def test_register_by_dotted_path(self, registry):
        @register_processor()
        class BookProcessor(Processor):
            pass

        name = f"{__name__}.TestRegistry.test_register_by_dotted_path.<locals>.BookProcessor"
        assert processor_for(name) is BookProcessor

    def test_register_by_name(self, registry):
        @register_processor("books")
        class BookProcessor(Processor):
            pass

        assert processor_for("books") is BookProcessor
        assert "books" in registry

    def test_unknown_processor(self):
        with pytest.raises(UnknownProcessorError) as exc_info:
            processor_for("myapp.NoSuchProcessor")
        assert exc_info.value.processor_name == "myapp.NoSuchProcessor"


class TestProcessor:
    class BookProcessor(Processor):
        def find(self):
            return {"resource": self.resource_class, "filters": self.params.get("filters")}

    def test_process(self):
        processor = self.BookProcessor("Book", "find", {"filters": {"title": "Dune"}})
        assert processor.process() == {"resource": "Book", "filters": {"title": "Dune"}}

    @pytest.mark.parametrize("operation_type", ["delete_resource", "process", "__init__"])
    def test_unsupported_operation(self, operation_type):
        processor = self.BookProcessor("Book", operation_type)
        with pytest.raises(ValueError, match="does not support"):
            processor.process()
