import pytest
from typer.testing import CliRunner

from appwrap.cli import app, find_config
from appwrap.config import load_config
from appwrap.errors import ConfigPathNotFoundError
from appwrap.version import __version__
from conftest import dummy_lines

runner = CliRunner()


def write_conf(project_dir, name="app.appwrap.conf"):
    path = project_dir / name
    path.write_text("\n".join(dummy_lines()), encoding="utf-8")
    return path


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_reference():
    result = runner.invoke(app, ["reference"])

    assert result.exit_code == 0
    assert "** AppBaseName **" in result.output
    assert "** SetupUninstallScript **" in result.output


def test_new_conf_is_loadable(tmp_path):
    path = tmp_path / "hello.appwrap.conf"
    result = runner.invoke(app, ["new", "conf", "--output", str(path)])

    assert result.exit_code == 0
    config = load_config(path)
    assert config.app_id == "net.example.helloworld"
    assert config.output_directory == str(tmp_path / "Deploy" / "OUT")


@pytest.mark.parametrize("item, text", [("desktop", "Exec=${INSTALL_EXEC}"), ("meta", "<releases>")])
def test_new_templates(tmp_path, item, text):
    path = tmp_path / "template"
    result = runner.invoke(app, ["new", item, "-o", str(path)])

    assert result.exit_code == 0
    assert text in path.read_text(encoding="utf-8")


def test_new_refuses_overwrite(tmp_path):
    path = tmp_path / "app.desktop"
    path.write_text("keep", encoding="utf-8")

    result = runner.invoke(app, ["new", "desktop", "-o", str(path)])
    assert result.exit_code == 1
    assert path.read_text(encoding="utf-8") == "keep"

    result = runner.invoke(app, ["new", "desktop", "-o", str(path), "--force"])
    assert result.exit_code == 0
    assert path.read_text(encoding="utf-8") != "keep"


def test_macros(project_dir):
    conf = write_conf(project_dir)
    result = runner.invoke(app, ["macros", "--kind", "rpm", "-r", "linux-arm64", "-c", str(conf)])

    assert result.exit_code == 0
    assert "Example: ${BUILD_ARCH} = aarch64" in result.output
    assert "Example: ${DEPLOY_KIND} = rpm" in result.output


def test_build_missing_config_exit_code(tmp_path):
    result = runner.invoke(app, ["build", "--kind", "deb", "--conf", str(tmp_path / "missing.conf")])
    assert result.exit_code == 2


def test_build_invalid_version_exit_code(project_dir):
    conf = write_conf(project_dir)
    result = runner.invoke(
        app, ["build", "-k", "zip", "-c", str(conf), "--app-version", "latest", "-y"]
    )
    assert result.exit_code == 2


def test_build_describes_and_can_be_cancelled(project_dir):
    conf = write_conf(project_dir)
    result = runner.invoke(
        app,
        ["build", "--kind", "ZIP", "--conf", str(project_dir), "-r", "linux-x64"],
        input="n\n",
    )

    assert result.exit_code == 1
    assert "OutputName: HelloWorld-5.4.3-2.linux-x64.zip" in result.output
    assert "Cancelled" in result.output
    assert not (project_dir / "Deploy").exists()
    assert conf.is_file()


def test_find_config(tmp_path):
    with pytest.raises(ConfigPathNotFoundError):
        find_config(tmp_path)

    first = write_conf(tmp_path, "a.appwrap.conf")
    assert find_config(tmp_path) == first
    assert find_config(first) == first

    write_conf(tmp_path, "b.appwrap.conf")
    with pytest.raises(ConfigPathNotFoundError, match="Multiple"):
        find_config(tmp_path)
