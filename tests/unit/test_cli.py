from cilium_demo_cli.main import build_parser, main
from fakes import FakeRunner


def run_cli(assets, runner, *args, prompt=None):
    argv = ["--assets-dir", str(assets), *args]
    if prompt is None:
        return main(argv, runner=runner)
    return main(argv, runner=runner, prompt=prompt)


def test_no_subcommand_prints_help(capsys):
    assert main([]) == 1
    assert "cilium-demo" in capsys.readouterr().out


def test_gateway_defaults_to_deploy():
    args = build_parser().parse_args(["gateway"])

    assert args.command == "deploy"


def test_gateway_unknown_command(assets, runner):
    assert run_cli(assets, runner, "gateway", "bogus") == 1


def test_gateway_dns(assets, runner, capsys):
    assert run_cli(assets, runner, "gateway", "dns") == 0
    assert "172.18.255.200 boutique.cilium.rocks" in capsys.readouterr().out


def test_setup_missing_tool_fails(assets):
    runner = FakeRunner(tools=["docker", "kubectl"])

    assert run_cli(assets, runner, "setup") == 1
    assert runner.called("kind") == []


def test_setup_docker_not_running(assets):
    runner = FakeRunner().on("docker", "info", returncode=1)

    assert run_cli(assets, runner, "setup") == 1
    assert runner.called("kind", "create") == []


def test_setup_with_skipped_steps(assets, runner):
    assert run_cli(assets, runner, "setup", "--skip", "preload-images", "--skip", "verify-bgp") == 0
    assert runner.called("helm", "template") == []
    assert runner.called("cilium", "bgp", "peers") == []


def test_setup_readiness_timeout_fails(assets, runner):
    runner.on("cilium", "status", returncode=1)

    assert run_cli(assets, runner, "setup") == 1
    policy = str(assets / "l2-announcement-policy.yaml")
    assert runner.called("kubectl", "apply", "-f", policy) == []


def test_cleanup_cancelled(assets):
    runner = FakeRunner()

    assert run_cli(assets, runner, "cleanup", prompt=lambda question: "n") == 0
    assert runner.calls == []


def test_cleanup_answer_eof_cancels(assets):
    runner = FakeRunner()

    def closed_stdin(question):
        raise EOFError

    assert run_cli(assets, runner, "cleanup", prompt=closed_stdin) == 0
    assert runner.calls == []


def test_cleanup_confirmed_interactively(assets):
    runner = FakeRunner().on("pgrep", returncode=1)
    answers = iter(["y", "yes"])

    assert run_cli(assets, runner, "cleanup", prompt=lambda question: next(answers)) == 0
    assert ["docker", "volume", "prune", "-f"] in runner.calls


def test_cleanup_yes_skips_prompts(assets, capsys):
    runner = FakeRunner().on("pgrep", returncode=1).on("kind", "get", "clusters", stdout="kind\n")

    def no_prompt(question):
        raise AssertionError("prompted with --yes")

    assert run_cli(assets, runner, "cleanup", "--yes", prompt=no_prompt) == 0
    assert ["kind", "delete", "cluster", "--name", "kind"] in runner.calls
    assert runner.called("docker", "volume") == []
    assert "[x] Kind cluster 'kind'" in capsys.readouterr().out


def test_hubble_launches_in_background(assets, runner):
    assert run_cli(assets, runner, "hubble") == 0
    assert runner.spawned == [["cilium", "hubble", "ui"]]


def test_bad_config_file(tmp_path, runner):
    path = tmp_path / "lab.yaml"
    path.write_text("nope: 1\n")

    assert main(["--config", str(path), "gateway", "help"], runner=runner) == 1


def test_setup_survives_unparseable_chart_output(assets, runner):
    runner.on("helm", "template", stdout="a: b: c\n  - [unclosed\n")

    assert run_cli(assets, runner, "setup") == 0
    assert runner.called("docker", "pull") == []
