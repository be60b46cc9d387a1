import json

import yaml

from bnl_helpers import craft_archive, record, sample_bnl

from bnltool.cli import main


def _write_sample(tmp_path, name="game.bnl"):
    path = tmp_path / name
    path.write_bytes(sample_bnl().to_bytes())
    return path


def test_list_with_summary(tmp_path, capsys):
    path = _write_sample(tmp_path)
    assert main(["-r", "silent", "list", str(path), "-s"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[:4] == [
        "aid_aidlist_ghoulies_sceneorder_game",
        "aid_texture_ui_icons_heart",
        "aid_misc_world_props_barrel",
        "aid_marker_world_spawn_start",
    ]
    assert out[4] == "4 assets found."
    assert out[5] == "4 Asset types: aidlist marker misc texture"


def test_list_type_filter(tmp_path, capsys):
    path = _write_sample(tmp_path)
    assert main(["-r", "silent", "list", str(path), "-t", "misc", "-s"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["aid_misc_world_props_barrel", "1 assets found."]


def test_extract_create_diff(tmp_path, capsys):
    path = _write_sample(tmp_path)
    out_dir = tmp_path / "out"
    assert main(["-r", "silent", "extract", str(path), "-d", str(out_dir)]) == 0
    rebuilt = tmp_path / "rebuilt.bnl"
    assert (
        main(["-r", "silent", "create", str(out_dir / "game_bnl"), "-o", str(rebuilt)])
        == 0
    )
    capsys.readouterr()

    assert main(["-r", "silent", "diff", "-a", str(path), str(rebuilt)]) == 0
    same = json.loads(capsys.readouterr().out)
    assert same["summary"]["count"] == 0

    # directory order differs from the original archive order
    assert main(["-r", "silent", "diff", str(path), str(rebuilt)]) == 1
    moved = json.loads(capsys.readouterr().out)
    assert moved["reordered"]


def test_inspect(tmp_path, capsys):
    path = _write_sample(tmp_path)
    assert main(["-r", "silent", "inspect", str(path)]) == 0
    out = capsys.readouterr().out
    assert "4 assets, flags=0x03" in out
    assert "aid_misc_world_props_barrel" in out

    assert main(["-r", "silent", "inspect", "--json", str(path)]) == 0
    info = json.loads(capsys.readouterr().out)
    assert info["issues"] == []
    assert info["header"]["file_count"] == 4


def test_inspect_reports_issues(tmp_path, capsys):
    bad = tmp_path / "bad.bnl"
    bad.write_bytes(craft_archive([record("a", 8, (0, 50))], descriptors=b"x"))
    assert main(["inspect", str(bad)]) == 1
    assert "WARN: Descriptor of a exceeds descriptor section" in capsys.readouterr().err


def test_errors_exit_non_zero(tmp_path, capsys):
    assert main(["list", str(tmp_path / "missing.bnl")]) == 1
    assert "ERROR" in capsys.readouterr().err

    corrupt = tmp_path / "corrupt.bnl"
    corrupt.write_bytes(b"\x01\x00" + b"\x00" * 38 + b"not zlib")
    assert main(["list", str(corrupt)]) == 1
    assert "E_DECOMPRESS" in capsys.readouterr().err


def test_config_file_applies(tmp_path, capsys):
    path = _write_sample(tmp_path)
    config = tmp_path / "strict.yaml"
    config.write_text(yaml.safe_dump({"name_size": 64}), encoding="utf-8")
    # records of 160 bytes read with a 64-byte name field cannot line up
    assert main(["--config", str(config), "inspect", str(path)]) == 1
    capsys.readouterr()

    config.write_text(yaml.safe_dump({"overlap_policy": "never"}), encoding="utf-8")
    assert main(["--config", str(config), "list", str(path)]) == 1
    assert "E_CONFIG" in capsys.readouterr().err


def test_apply_mod(tmp_path, capsys):
    path = _write_sample(tmp_path)
    mod = tmp_path / "mod"
    override = mod / "overrides" / "aid_aidlist_ghoulies_sceneorder_game"
    override.mkdir(parents=True)
    (mod / "mod.json").write_text(json.dumps({"version": 1, "name": "demo"}))
    (override / "override.txt").write_text("aid_script_level_one_b\n")
    out = tmp_path / "modded.bnl"
    assert main(["apply-mod", str(path), str(mod), "-o", str(out)]) == 0
    assert out.is_file()
    assert "applied 1/1 overrides" in capsys.readouterr().err


def test_json_reporter_emits_summary(tmp_path, capsys):
    path = _write_sample(tmp_path)
    assert main(["-r", "json", "inspect", str(path)]) == 0
    events = [
        json.loads(line)
        for line in capsys.readouterr().out.splitlines()
        if line.startswith("{")
    ]
    summaries = [e for e in events if e.get("event") == "summary"]
    assert summaries[-1]["summary_type"] == "inspect"
    assert summaries[-1]["issues"] == 0
    assert summaries[-1]["raw"] == "Inspect summary: file=game.bnl issues=0"
