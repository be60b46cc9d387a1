import json

import pytest

from bnl_helpers import sample_bnl

from bnltool import api
from bnltool.archive.container import BNLFile
from bnltool.archive.errors import E_MOD, ModError
from bnltool.archive.types import AssetType
from bnltool.assets import AidList
from bnltool.modding import AssetOverride, Mod, ModSpecification, parse_aid

AIDLIST = "aid_aidlist_ghoulies_sceneorder_game"


def _make_mod(root, overrides, spec=None):
    root.mkdir()
    (root / "mod.json").write_text(
        json.dumps(spec if spec is not None else {"version": 1, "name": "test"})
    )
    (root / "overrides").mkdir()
    for aid, text in overrides.items():
        d = root / "overrides" / aid
        d.mkdir()
        if text is not None:
            (d / "override.txt").write_text(text)
    return root


def test_parse_aid():
    aid = parse_aid("aid_texture_ui_icons_heart")
    assert aid.asset_type is AssetType.TEXTURE
    assert (aid.category, aid.group, aid.entry) == ("ui", "icons", "heart")
    with pytest.raises(ModError) as exc:
        parse_aid("texture_heart")
    assert exc.value.code == E_MOD
    with pytest.raises(ModError):
        parse_aid("aid_sprite_ui_icons_heart")


def test_mod_loads_aidlist_overrides(tmp_path, caplog):
    mod_dir = _make_mod(
        tmp_path / "mod",
        {
            AIDLIST: "aid_script_level_three_a\naid_script_level_four_a\n",
            "aid_texture_ui_icons_heart": "ignored",
        },
    )
    with caplog.at_level("WARNING", logger="bnltool"):
        mod = Mod.from_dir(mod_dir)
    assert mod.spec.name == "test"
    assert list(mod.overrides) == [AIDLIST]
    assert len(mod.overrides[AIDLIST].descriptor_bytes) == 256
    assert any("aid_texture_ui_icons_heart" in r.getMessage() for r in caplog.records)


def test_mod_apply_moves_asset_to_end():
    bnl = sample_bnl()
    mod = Mod(
        spec=ModSpecification(1, "inline"),
        overrides={
            AIDLIST: AssetOverride(AidList(["aid_x_y_z_w"]).get_descriptor().to_bytes()),
            "aid_misc_world_props_barrel": AssetOverride(b"d", [b"chunk"]),
            "aid_aidlist_missing_a_b": AssetOverride(b""),
        },
    )
    assert mod.apply(bnl) == 2
    assert bnl.names()[-2:] == [AIDLIST, "aid_misc_world_props_barrel"]
    assert bnl.get_asset(AidList, AIDLIST).asset.asset_ids == ["aid_x_y_z_w"]
    barrel = bnl.get_raw_asset("aid_misc_world_props_barrel")
    assert (barrel.descriptor_bytes, barrel.resource_chunks) == (b"d", [b"chunk"])


def test_apply_mod_end_to_end(tmp_path):
    archive = tmp_path / "game.bnl"
    archive.write_bytes(sample_bnl().to_bytes())
    mod_dir = _make_mod(
        tmp_path / "mod",
        {AIDLIST: "aid_x_y_z_w\n", "aid_aidlist_missing_a_b": "aid_q_r_s_t"},
    )
    result = api.apply_mod(archive, mod_dir, tmp_path / "modded.bnl")
    assert result.applied == 1
    assert result.overrides == 2
    assert result.skipped == ["aid_aidlist_missing_a_b"]

    modded = BNLFile.from_bytes((tmp_path / "modded.bnl").read_bytes())
    assert modded.names()[-1] == AIDLIST
    assert modded.get_asset(AidList, AIDLIST).asset.asset_ids == ["aid_x_y_z_w"]
    assert len(modded) == 4


@pytest.mark.parametrize(
    "spec",
    [{"version": "1", "name": "x"}, {"version": 1}, ["not", "a", "mapping"]],
)
def test_mod_spec_validated(tmp_path, spec):
    mod_dir = _make_mod(tmp_path / "mod", {}, spec=spec)
    with pytest.raises(ModError):
        Mod.from_dir(mod_dir)


def test_mod_structure_errors(tmp_path):
    with pytest.raises(ModError):
        Mod.from_dir(tmp_path)
    (tmp_path / "mod.json").write_text("{not json")
    (tmp_path / "overrides").mkdir()
    with pytest.raises(ModError):
        Mod.from_dir(tmp_path)


def test_mod_override_file_required(tmp_path):
    mod_dir = _make_mod(tmp_path / "mod", {AIDLIST: None})
    with pytest.raises(ModError):
        Mod.from_dir(mod_dir)


def test_mod_override_names_must_fit(tmp_path):
    mod_dir = _make_mod(tmp_path / "mod", {AIDLIST: "x" * 200})
    with pytest.raises(ModError) as exc:
        Mod.from_dir(mod_dir)
    assert exc.value.code == E_MOD
