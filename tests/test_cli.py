from click.testing import CliRunner

from plainpost.cli import cli
from plainpost.errors import WatchError
from plainpost.frontmatter import parse_post


def fake_prompts(monkeypatch, answers):
    responses = iter(answers)

    def mock_text(*args, **kwargs):
        class MockQuestion:
            def ask(self):
                return next(responses)

        return MockQuestion()

    monkeypatch.setattr("plainpost.cli.questionary.text", mock_text)


def test_cli_new_scaffolds_blog(tmp_path):
    runner = CliRunner()
    target = tmp_path / "myblog"
    result = runner.invoke(cli, ["new", str(target)])
    assert result.exit_code == 0
    assert (target / "plainpost.yaml").exists()
    assert (target / "posts" / "hello-world.md").exists()
    assert (target / "templates" / "default.html").exists()
    assert (target / "static").is_dir()
    assert not (target / "static" / ".keep").exists()
    assert (target / "rebuild.sh").stat().st_mode & 0o111

    # fails on non-empty directory
    result = runner.invoke(cli, ["new", str(target)])
    assert result.exit_code != 0
    assert "non-empty" in result.output


def test_cli_build_scaffolded_blog(monkeypatch, tmp_path):
    runner = CliRunner()
    project = tmp_path / "myblog"
    runner.invoke(cli, ["new", str(project)])
    monkeypatch.chdir(project)

    result = runner.invoke(cli, ["build", "-v", "posts", "templates", "static"], catch_exceptions=False)
    assert result.exit_code == 0
    assert "Generating static html from posts to static" in result.output
    assert "Title: Hello, world" in result.output
    assert "Built 1 posts into static" in result.output

    static = project / "static"
    assert (static / "posts" / "hello-world.html").exists()
    for name in ("index.html", "about.html", "contact.html", "archive.html", "atom.xml", "rss.xml"):
        assert (static / name).exists()
    assert "My blog - All posts" in (static / "atom.xml").read_text(encoding="utf-8")


def test_cli_build_failure_exits_with_one(tmp_path):
    runner = CliRunner()
    src = tmp_path / "posts"
    src.mkdir()
    result = runner.invoke(cli, ["build", str(src), str(tmp_path / "templates"), str(tmp_path / "out")])
    assert result.exit_code == 1
    assert "Build failed:" in result.output


def test_cli_build_requires_three_arguments(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ["build", str(tmp_path)])
    assert result.exit_code == 2
    assert "Missing argument" in result.output


def test_cli_build_bad_config_value_is_reported(tmp_path):
    runner = CliRunner()
    config = tmp_path / "plainpost.yaml"
    config.write_text("recent_posts: five\n", encoding="utf-8")
    result = runner.invoke(
        cli,
        ["build", "--config", str(config), str(tmp_path), str(tmp_path), str(tmp_path / "out")],
    )
    assert result.exit_code == 1
    assert "Build failed:" in result.output
    assert "recent_posts" in result.output
    assert not isinstance(result.exception, ValueError)


def test_cli_dateconv():
    runner = CliRunner()
    result = runner.invoke(cli, ["dateconv", "2006-01-02"])
    assert result.exit_code == 0
    assert result.output.strip() == "Mon, 02 Jan 2006 00:00:00 +0000"

    result = runner.invoke(cli, ["dateconv", "02/01/2006"])
    assert result.exit_code == 2
    assert "YYYY-MM-DD" in result.output


def test_cli_watch_uses_options_over_config(monkeypatch, tmp_path):
    runner = CliRunner()
    config = tmp_path / "plainpost.yaml"
    config.write_text(
        "watch_dir: posts\nwatch_cmd: ./rebuild.sh\nport: ':9000'\nstatic_dir: public\n",
        encoding="utf-8",
    )
    called = {}

    class DummyServer:
        def __init__(self, watch_dir, command, address=":8080", static_dir="static"):
            called.update(watch_dir=watch_dir, command=command, address=address, static_dir=static_dir)

        def start(self):
            called["started"] = True

    monkeypatch.setattr("plainpost.server.WatchServer", DummyServer)

    result = runner.invoke(cli, ["watch", "--config", str(config)], catch_exceptions=False)
    assert result.exit_code == 0
    assert called == {
        "watch_dir": "posts",
        "command": "./rebuild.sh",
        "address": ":9000",
        "static_dir": "public",
        "started": True,
    }

    result = runner.invoke(
        cli,
        ["watch", "--config", str(config), "--dir", "drafts", "--cmd", "make", "--port", ":7000"],
        catch_exceptions=False,
    )
    assert result.exit_code == 0
    assert called["watch_dir"] == "drafts"
    assert called["command"] == "make"
    assert called["address"] == ":7000"


def test_cli_watch_failure(monkeypatch, tmp_path):
    runner = CliRunner()

    class FailingServer:
        def __init__(self, *args, **kwargs):
            pass

        def start(self):
            raise WatchError(tmp_path / "posts", "Watch directory does not exist")

    monkeypatch.setattr("plainpost.server.WatchServer", FailingServer)
    result = runner.invoke(cli, ["watch", "--config", str(tmp_path / "none.yaml")])
    assert result.exit_code == 1
    assert "Watch failed:" in result.output
    assert "Watch directory does not exist" in result.output


def test_cli_post_creates_file(monkeypatch, tmp_path):
    runner = CliRunner()
    posts = tmp_path / "posts"
    posts.mkdir()
    config = tmp_path / "plainpost.yaml"
    config.write_text("author_name: Jane Doe\nauthor_email: jane@example.com\n", encoding="utf-8")
    fake_prompts(monkeypatch, ["My First Post", "go, web", "Short summary"])

    result = runner.invoke(cli, ["post", str(posts), "--config", str(config)], catch_exceptions=False)
    assert result.exit_code == 0

    target = posts / "my-first-post.md"
    assert target.exists()
    assert target.read_text(encoding="utf-8").endswith("\n\n# My First Post\n\n")

    post = parse_post(target)
    assert post.title == "My First Post"
    assert post.description == "Short summary"
    assert post.tag_names() == ["go", "web"]
    assert post.author.combine() == "Jane Doe"
    assert post.author.email == "jane@example.com"


def test_cli_post_refuses_existing_file(monkeypatch, tmp_path):
    runner = CliRunner()
    posts = tmp_path / "posts"
    posts.mkdir()
    (posts / "taken.md").write_text("title: Taken\n", encoding="utf-8")
    fake_prompts(monkeypatch, ["Taken", "", ""])

    result = runner.invoke(cli, ["post", str(posts), "--config", str(tmp_path / "none.yaml")])
    assert result.exit_code != 0
    assert "already exists" in result.output


def test_cli_post_aborts_on_cancel(monkeypatch, tmp_path):
    runner = CliRunner()
    posts = tmp_path / "posts"
    posts.mkdir()
    fake_prompts(monkeypatch, [None])

    result = runner.invoke(cli, ["post", str(posts), "--config", str(tmp_path / "none.yaml")])
    assert result.exit_code == 1
    assert "Aborted" in result.output
    assert list(posts.iterdir()) == []


def test_cli_post_requires_directory(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ["post", str(tmp_path / "missing")])
    assert result.exit_code != 0
    assert "No posts directory" in result.output


def test_module_main_entrypoint():
    from plainpost.__main__ import main

    assert callable(main)


def test_main_invokes_cli(monkeypatch):
    import plainpost.cli as cli_mod

    called = {}

    def fake_cli():
        called["ran"] = True

    monkeypatch.setattr(cli_mod, "cli", fake_cli)
    cli_mod.main()
    assert called["ran"]


def test_version_option():
    from plainpost import __version__

    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_post_prompts_use_style(monkeypatch, tmp_path):
    import plainpost.cli as cli_mod

    posts = tmp_path / "posts"
    posts.mkdir()
    styles = []
    responses = iter(["Styled", "", ""])

    def mock_text(*args, **kwargs):
        styles.append(kwargs.get("style"))

        class MockQuestion:
            def ask(self):
                return next(responses)

        return MockQuestion()

    monkeypatch.setattr("plainpost.cli.questionary.text", mock_text)
    result = CliRunner().invoke(cli, ["post", str(posts), "--config", str(tmp_path / "none.yaml")])
    assert result.exit_code == 0
    assert styles == [cli_mod._PROMPT_STYLE] * 3
