"""Unit tests for the SceneManager class.

Tests cover:
- Adding spheres with each material kind
- Sphere records and counts
- Dict and JSON serialization
- Validation of malformed scenes
"""

import json

import pytest


class TestAddSpheres:
    """Tests for the add_* convenience methods."""

    def test_add_each_material(self):
        from src.pathtracer.materials.material import MaterialType
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        a = scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, (0.8, 0.8, 0.0))
        b = scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), 0.3)
        c = scene.add_dielectric_sphere((-1.0, 0.0, -1.0), 0.5)

        assert (a, b, c) == (0, 1, 2)
        assert scene.get_sphere_count() == 3
        kinds = [info.material.material_type for info in scene.spheres]
        assert kinds == [MaterialType.LAMBERTIAN, MaterialType.METAL, MaterialType.DIELECTRIC]
        assert scene.spheres[2].material.ior == 1.5

    def test_accepts_vec3_center(self):
        from src.pathtracer.core.vector import point
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere(point(1.0, 2.0, 3.0), 0.5)
        assert scene.spheres[0].center == (1.0, 2.0, 3.0)

    def test_new_manager_starts_empty(self):
        from src.pathtracer.scene.manager import SceneManager

        SceneManager().add_dielectric_sphere((0.0, 0.0, 0.0), 1.0)
        assert SceneManager().get_sphere_count() == 0

    def test_clear(self):
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((0.0, 0.0, 0.0), 1.0)
        scene.clear()
        assert scene.get_sphere_count() == 0
        assert scene.spheres == []

    def test_invalid_radius_raises(self):
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        with pytest.raises(ValueError):
            scene.add_dielectric_sphere((0.0, 0.0, 0.0), -1.0)
        assert scene.spheres == []

    def test_max_spheres(self):
        from src.pathtracer.scene.manager import SceneManager
        from src.pathtracer.scene.world import MAX_SPHERES

        assert SceneManager.get_max_spheres() == MAX_SPHERES


class TestSerialization:
    """Tests for to_dict/from_dict and JSON files."""

    def _build(self):
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, -1000.0, 0.0), 1000.0, (0.5, 0.5, 0.5))
        scene.add_metal_sphere((4.0, 1.0, 0.0), 1.0, (0.7, 0.6, 0.5), 0.0)
        scene.add_dielectric_sphere((0.0, 1.0, 0.0), 1.0, 1.5)
        return scene

    def test_to_dict_format(self):
        data = self._build().to_dict()
        assert len(data["spheres"]) == 3
        assert data["spheres"][0] == {
            "center": [0.0, -1000.0, 0.0],
            "radius": 1000.0,
            "material": {"type": "lambertian", "albedo": [0.5, 0.5, 0.5]},
        }
        assert data["spheres"][1]["material"]["type"] == "metal"
        assert data["spheres"][2]["material"] == {"type": "dielectric", "ior": 1.5}

    def test_json_file_preserves_scene(self, tmp_path):
        from src.pathtracer.scene.manager import SceneManager

        path = tmp_path / "scene.json"
        original = self._build()
        original.save_json(path)
        expected = original.to_dict()

        loaded = SceneManager()
        loaded.load_json(path)
        assert loaded.get_sphere_count() == 3
        assert loaded.to_dict() == expected

    def test_from_dict_replaces_scene(self):
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((0.0, 0.0, 0.0), 1.0)
        scene.add_dielectric_sphere((0.0, 0.0, 3.0), 1.0)
        scene.from_dict(
            {
                "spheres": [
                    {
                        "center": [1.0, 2.0, 3.0],
                        "radius": 0.5,
                        "material": {"type": "metal", "albedo": [1.0, 1.0, 1.0], "fuzz": 4.0},
                    }
                ]
            }
        )
        assert scene.get_sphere_count() == 1
        assert scene.spheres[0].material.fuzz == 1.0

    @pytest.mark.parametrize(
        "record",
        [
            {"radius": 1.0, "material": {"type": "dielectric", "ior": 1.5}},
            {"center": [0.0, 0.0], "radius": 1.0, "material": {"type": "dielectric", "ior": 1.5}},
            {"center": [0.0, 0.0, 0.0], "radius": 1.0, "material": {"type": "plastic"}},
            {"center": [0.0, 0.0, 0.0], "radius": 1.0, "material": {"type": "lambertian"}},
            {"center": [0.0, 0.0, 0.0], "radius": 0.0, "material": {"type": "dielectric", "ior": 1.5}},
            {"center": 5, "radius": 1.0, "material": {"type": "dielectric", "ior": 1.5}},
            {"center": [0.0, "a", 0.0], "radius": 1.0, "material": {"type": "dielectric", "ior": 1.5}},
            {"center": [0.0, 0.0, 0.0], "radius": [1.0], "material": {"type": "dielectric", "ior": 1.5}},
            {"center": [0.0, 0.0, 0.0], "radius": 1.0, "material": {"type": "lambertian", "albedo": 3}},
            {"center": [0.0, 0.0, 0.0], "radius": 1.0, "material": "glass"},
            "sphere",
        ],
    )
    def test_malformed_records_raise(self, record):
        from src.pathtracer.scene.manager import SceneManager

        with pytest.raises(ValueError):
            SceneManager().from_dict({"spheres": [record]})

    def test_too_many_spheres_raises(self):
        from src.pathtracer.scene.manager import SceneManager
        from src.pathtracer.scene.world import MAX_SPHERES

        record = {"center": [0.0, 0.0, 0.0], "radius": 1.0, "material": {"type": "dielectric", "ior": 1.5}}
        with pytest.raises(RuntimeError):
            SceneManager().from_dict({"spheres": [record] * (MAX_SPHERES + 1)})

    def test_invalid_json_raises(self, tmp_path):
        from src.pathtracer.scene.manager import SceneManager

        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ValueError):
            SceneManager().load_json(path)

    def test_saved_file_is_json(self, tmp_path):
        path = tmp_path / "scene.json"
        self._build().save_json(path)
        assert len(json.loads(path.read_text())["spheres"]) == 3

    @pytest.mark.parametrize("data", [[], {"spheres": 5}, "scene"])
    def test_malformed_top_level_raises(self, data):
        from src.pathtracer.scene.manager import SceneManager

        with pytest.raises(ValueError):
            SceneManager().from_dict(data)

    def test_bad_file_keeps_current_scene(self, tmp_path):
        from src.pathtracer.scene.manager import SceneManager

        scene = self._build()
        before = scene.to_dict()

        path = tmp_path / "bad.json"
        path.write_text(
            json.dumps(
                {
                    "spheres": [
                        {"center": [0.0, 0.0, 0.0], "radius": 1.0, "material": {"type": "dielectric", "ior": 1.5}},
                        {"center": 7, "radius": 1.0, "material": {"type": "dielectric", "ior": 1.5}},
                    ]
                }
            )
        )
        with pytest.raises(ValueError):
            scene.load_json(path)

        assert scene.to_dict() == before
        assert scene.get_sphere_count() == 3

    def test_top_level_list_file_raises(self, tmp_path):
        from src.pathtracer.scene.manager import SceneManager

        path = tmp_path / "list.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError):
            SceneManager().load_json(path)
