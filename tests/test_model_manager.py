"""Tests for core.model_manager module."""

from core.model_manager import (
    HAM10000_CLASSES,
    MODEL_REGISTRY,
    ModelManager,
    get_model_manager,
)


class TestModelRegistry:
    def test_registry_not_empty(self):
        assert len(MODEL_REGISTRY) >= 2

    def test_default_model_in_registry(self):
        names = [m.name for m in MODEL_REGISTRY]
        assert "skin-efficientnet-b0" in names

    def test_model_info_fields(self):
        for model in MODEL_REGISTRY:
            assert model.name
            assert model.display_name
            assert model.architecture
            assert model.input_size > 0
            assert model.size_mb > 0
            assert model.description
            assert model.classes == HAM10000_CLASSES

    def test_classes_are_distinct(self):
        assert len(set(HAM10000_CLASSES)) == 7
        assert "melanoma" in HAM10000_CLASSES


class TestModelManager:
    def test_get_model_info(self, model_manager):
        info = model_manager.get_model_info("skin-efficientnet-b0")
        assert info is not None
        assert info.architecture == "efficientnet_b0"
        assert info.input_size == 224

    def test_get_model_info_unknown(self, model_manager):
        assert model_manager.get_model_info("nonexistent-model") is None

    def test_get_model_path_defaults_to_user_dir(self, model_manager, models_dir):
        path = model_manager.get_model_path("skin-efficientnet-b0")
        assert path == models_dir / "skin-efficientnet-b0" / "model.pth"

    def test_search_paths_order(self, model_manager, models_dir):
        paths = model_manager.get_search_paths("skin-mobilenetv3")
        assert paths[0].parent.parent == models_dir
        assert "assets" in paths[1].parts

    def test_model_available_after_install(self, model_manager, installed_model):
        assert model_manager.is_model_available("skin-efficientnet-b0") is True
        assert model_manager.get_model_path("skin-efficientnet-b0") == installed_model

    def test_model_not_available(self, model_manager):
        assert model_manager.is_model_available("skin-mobilenetv3") is False

    def test_unknown_model_not_available(self, model_manager):
        assert model_manager.is_model_available("nonexistent-model") is False

    def test_size_formatted(self, model_manager, installed_model):
        formatted = model_manager.get_model_size_formatted("skin-efficientnet-b0")
        assert any(unit in formatted for unit in ("B", "KB", "MB", "GB"))

    def test_size_formatted_missing(self, model_manager):
        assert model_manager.get_model_size_formatted("skin-mobilenetv3") == "0 B"

    def test_singleton(self):
        mm1 = get_model_manager()
        mm2 = get_model_manager()
        assert mm1 is mm2
