import sys

import pytest

from cgmlst_typer.core.tools import (
    ToolCommand,
    ToolRunner,
    allele_call_command,
    hiercc_command,
    join_profiles_command,
)
from cgmlst_typer.errors import ToolExecutionError, AlleleCallError, TypingError


def test_allele_call_command_shape():
    cmd = allele_call_command("chewBBACA.py", "/s/in", "/b/schema", "/s/out", 4)
    assert cmd.label == "Allele Call"
    assert cmd.argv[:2] == ("chewBBACA.py", "AlleleCall")
    assert cmd.argv[cmd.argv.index("--cpu") + 1] == "4"
    assert "--no-inferred" in cmd.argv


def test_join_and_cluster_commands():
    join = join_profiles_command("chewBBACA.py", "m.tsv", "n.tsv", "j.tsv")
    assert join.argv == ("chewBBACA.py", "JoinProfiles", "--profiles", "m.tsv", "n.tsv", "--output-file", "j.tsv")
    hc = hiercc_command("pHierCC", "c.tsv", "out/cluster", "out/archive.npz")
    assert hc.argv == ("pHierCC", "--profile", "c.tsv", "--output", "out/cluster", "--append", "out/archive.npz")


def test_run_success():
    cmd = ToolCommand.build("echo", sys.executable, "-c", "print('hello')")
    proc = ToolRunner().run(cmd)
    assert proc.returncode == 0
    assert proc.stdout.strip() == "hello"


def test_run_failure_raises():
    cmd = ToolCommand.build("fail", sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)")
    with pytest.raises(ToolExecutionError) as err:
        ToolRunner().run(cmd)
    assert err.value.returncode == 3
    assert "boom" in str(err.value)


def test_run_missing_program():
    cmd = ToolCommand.build("missing", "definitely-not-a-real-tool-xyz")
    with pytest.raises(ToolExecutionError, match="could not start"):
        ToolRunner().run(cmd)


def test_dry_run_does_not_execute(tmp_path):
    target = tmp_path / "touched"
    cmd = ToolCommand.build("touch", sys.executable, "-c", f"open({str(target)!r}, 'w').close()")
    runner = ToolRunner(dry_run=True)
    assert runner.run(cmd) is None
    assert not target.exists()
    assert runner.call("step", lambda: 1 / 0, placeholder="ph") == "ph"
    assert runner.require(tmp_path / "absent", "step") == tmp_path / "absent"


def test_call_runs_when_not_dry():
    assert ToolRunner().call("add", lambda a, b=0: a + b, 2, b=3) == 5


def test_require(tmp_path):
    runner = ToolRunner()
    with pytest.raises(AlleleCallError, match="is missing"):
        runner.require(tmp_path / "absent.tsv", "Allele Call", AlleleCallError)
    empty = tmp_path / "empty.tsv"
    empty.write_text("")
    with pytest.raises(TypingError, match="is empty"):
        runner.require(empty, "step")
    full = tmp_path / "full.tsv"
    full.write_text("x")
    assert runner.require(full, "step") == full
