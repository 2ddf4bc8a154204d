import json

import pytest

from betterdeploy.completion import Completion
from betterdeploy.dsl import command, deploy, git, npm
from betterdeploy.manifest import (
    dumps_manifest,
    load_manifest,
    loads_manifest,
    manifest_to_dict,
    parse_manifest,
)
from betterdeploy.model import CommandStep, GitStep, Manifest, ManifestError, NpmStep

from conftest import REDIS_URL, TEST_LOG_LINE


@pytest.mark.parametrize("variant", ["variant_a", "variant_b"])
def test_variants_have_the_three_steps_in_order(variant, request):
    m = parse_manifest(request.getfixturevalue(variant))
    assert m.names() == ["id3", "node-redis", "run tests"]
    assert len(m) == 3


@pytest.mark.parametrize("variant", ["variant_a", "variant_b"])
def test_npm_and_git_steps(variant, request):
    m = parse_manifest(request.getfixturevalue(variant))

    assert isinstance(m["id3"], NpmStep)
    assert m["id3"].type == "npm"
    assert m["id3"].package == "id3"

    redis = m["node-redis"]
    assert isinstance(redis, GitStep)
    assert redis.type == "git"
    assert redis.path == REDIS_URL


def test_variant_a_single_callable(variant_a, capsys):
    step = parse_manifest(variant_a)["run tests"]
    assert isinstance(step, CommandStep)
    assert step.type == "command"
    assert len(step.units) == 1
    assert callable(step.units[0])

    done = Completion()
    calls = []
    original_success = done.success

    def counting_success():
        calls.append(capsys.readouterr().out)
        original_success()

    done.success = counting_success
    step.units[0](done)

    assert len(calls) == 1
    # the log line is written before completion is signalled
    assert calls[0] == TEST_LOG_LINE + "\n"
    assert done.done()


def test_variant_b_callable_then_text(variant_b):
    step = parse_manifest(variant_b)["run tests"]
    assert step.type == "command"
    assert len(step.units) == 2
    assert callable(step.units[0])
    assert step.units[1] == "rm -rf .deploy"


def test_mixture_keeps_separate_cleanup_step(mixture):
    m = parse_manifest(mixture)
    assert m.names() == ["id3", "node-redis", "run tests", "echo"]
    assert m["echo"].units == ("rm -rf .deploy",)


@pytest.mark.parametrize("variant", ["variant_a", "variant_b", "mixture"])
def test_round_trip_is_stable(variant, request):
    raw = request.getfixturevalue(variant)
    m = parse_manifest(raw)
    again = parse_manifest(manifest_to_dict(m))
    assert again == m
    assert manifest_to_dict(again) == raw


def test_json_round_trip_for_textual_manifest():
    m = deploy(
        npm("id3"),
        git("node-redis", REDIS_URL),
        command("cleanup", "echo one", "rm -rf .deploy"),
    )
    text = dumps_manifest(m)
    assert json.loads(text)["cleanup"] == {"type": "command", "commands": ["echo one", "rm -rf .deploy"]}
    assert loads_manifest(text) == m


def test_json_dump_rejects_callables(variant_a):
    with pytest.raises(ManifestError, match="run tests"):
        dumps_manifest(parse_manifest(variant_a))


def test_dsl_matches_raw_mapping(variant_b):
    from conftest import run_tests

    built = deploy(
        npm("id3"),
        git("node-redis", REDIS_URL),
        command("run tests", run_tests, "rm -rf .deploy"),
    )
    assert built == parse_manifest(variant_b)


def test_dsl_command_needs_units():
    with pytest.raises(ValueError):
        command("empty")


@pytest.mark.parametrize(
    "raw, message",
    [
        ({"x": {}}, "no 'type'"),
        ({"x": {"type": "rsync"}}, "unknown type"),
        ({"x": {"type": "git"}}, "'path'"),
        ({"x": {"type": "git", "path": 42}}, "'path'"),
        ({"x": {"type": "command"}}, "'command' or 'commands'"),
        ({"x": {"type": "command", "command": "a", "commands": ["b"]}}, "both"),
        ({"x": {"type": "command", "commands": []}}, "must not be empty"),
        ({"x": {"type": "command", "commands": "ls"}}, "must be a list"),
        ({"x": {"type": "command", "command": 3}}, "invalid unit"),
        ({"x": "npm"}, "must be a mapping"),
    ],
)
def test_invalid_steps(raw, message):
    with pytest.raises(ManifestError, match=message):
        parse_manifest(raw)


def test_manifest_rejects_duplicate_names():
    with pytest.raises(ManifestError, match="Duplicate"):
        Manifest(steps=(npm("id3"), npm("id3")))


def test_manifest_is_read_only(variant_a):
    m = parse_manifest(variant_a)
    with pytest.raises(AttributeError):
        m.steps = ()
    with pytest.raises(AttributeError):
        m["node-redis"].path = "elsewhere"


def test_load_python_manifest(tmp_path):
    f = tmp_path / "deploy_manifest.py"
    f.write_text(
        "def cb(done):\n"
        "    done()\n"
        "MANIFEST = {\n"
        "    'id3': {'type': 'npm'},\n"
        "    'run tests': {'type': 'command', 'commands': [cb, 'rm -rf .deploy']},\n"
        "}\n"
    )
    m = load_manifest(f)
    assert m.names() == ["id3", "run tests"]
    assert m["run tests"].units[1] == "rm -rf .deploy"


def test_load_python_manifest_hook(tmp_path):
    f = tmp_path / "hook_manifest.py"
    f.write_text(
        "from betterdeploy import deploy, npm\n"
        "def manifest():\n"
        "    return deploy(npm('id3'))\n"
    )
    assert load_manifest(f).names() == ["id3"]


def test_load_json_manifest(tmp_path):
    f = tmp_path / "deploy.json"
    f.write_text(json.dumps({"echo": {"type": "command", "command": "rm -rf .deploy"}}))
    assert load_manifest(f)["echo"].units == ("rm -rf .deploy",)


def test_load_manifest_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_manifest(tmp_path / "missing.py")

    yml = tmp_path / "deploy.yml"
    yml.write_text("id3: {type: npm}\n")
    with pytest.raises(ManifestError, match=".py or .json"):
        load_manifest(yml)

    empty = tmp_path / "empty_manifest.py"
    empty.write_text("X = 1\n")
    with pytest.raises(ManifestError, match="MANIFEST"):
        load_manifest(empty)

    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{not json")
    with pytest.raises(ManifestError, match="Invalid manifest JSON"):
        load_manifest(bad_json)


def test_bare_string_units_are_one_command():
    step = CommandStep(name="echo", units="rm -rf .deploy")
    assert step.units == ("rm -rf .deploy",)


def test_model_validates_units_however_the_step_is_built():
    with pytest.raises(ManifestError, match="'x' has an invalid unit 3"):
        command("x", 3)
    with pytest.raises(ManifestError, match="invalid unit"):
        CommandStep(name="x", units=["ls", None])
    with pytest.raises(ManifestError, match="must be a list"):
        CommandStep(name="x", units=42)


def test_single_item_commands_list_is_written_back_as_command():
    raw = {"echo": {"type": "command", "commands": ["rm -rf .deploy"]}}
    m = parse_manifest(raw)
    assert manifest_to_dict(m) == {"echo": {"type": "command", "command": "rm -rf .deploy"}}
    assert parse_manifest(manifest_to_dict(m)) == m
