"""
Tests for the files a build leaves behind — release description, env files,
profile.d scripts — and the dependency manifest.
"""

from pathlib import Path

import pytest
import yaml

from javastage.core.errors import ReleaseMissingError, StagingWriteError
from javastage.core.persistence.release_file import (
    default_release_path,
    load_release,
    render_release,
    save_release,
)
from javastage.core.services.dependencies import (
    DependencyManifest,
    InstallError,
    ManifestInstaller,
)
from javastage.core.services.staging_fs import StagingFilesystem


class TestReleaseFile:
    def test_render(self):
        assert render_release("$HOME/bin/app") == (
            "---\ndefault_process_types:\n  web: $HOME/bin/app\n"
        )

    def test_save_and_load(self, tmp_path: Path):
        path = default_release_path(tmp_path)
        save_release("java -jar app.jar", path)
        assert path == tmp_path / "tmp" / "javastage-release.yml"
        content = load_release(path)
        assert yaml.safe_load(content) == {"default_process_types": {"web": "java -jar app.jar"}}

    def test_save_leaves_no_temp_files(self, tmp_path: Path):
        path = tmp_path / "release.yml"
        save_release("a", path)
        save_release("b", path)
        assert [p.name for p in tmp_path.iterdir()] == ["release.yml"]
        assert "web: b" in path.read_text()

    def test_load_missing(self, tmp_path: Path):
        with pytest.raises(ReleaseMissingError):
            load_release(tmp_path / "missing.yml")

    def test_unwritable(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with pytest.raises(StagingWriteError):
            save_release("a", blocker / "release.yml")


class TestStagingFilesystem:
    def test_env_file(self, tmp_path: Path):
        fs = StagingFilesystem(tmp_path / "deps" / "0")
        path = fs.write_env_file("CLASSPATH", ".:app.jar")
        assert path == tmp_path / "deps" / "0" / "env" / "CLASSPATH"
        assert fs.read_env_file("CLASSPATH") == ".:app.jar"
        assert fs.read_env_file("MISSING") is None

    def test_profile_d_is_executable(self, tmp_path: Path):
        fs = StagingFilesystem(tmp_path)
        path = fs.write_profile_d("java.sh", "export A=1\n")
        assert path.stat().st_mode & 0o777 == 0o755

    def test_write_error_is_fatal(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        fs = StagingFilesystem(blocker)
        with pytest.raises(StagingWriteError):
            fs.write_env_file("A", "1")


MANIFEST = """\
dependencies:
  - name: openjdk
    version: 17.0.9
    uri: https://example.com/openjdk-17.0.9.tar.gz
  - name: openjdk
    version: 21.0.1
  - name: tomcat
    version: 10.1.16
default_versions:
  - name: openjdk
    version: 21.0.1
"""


@pytest.fixture
def buildpack(tmp_path: Path) -> Path:
    bp = tmp_path / "buildpack"
    bp.mkdir()
    (bp / "manifest.yml").write_text(MANIFEST)
    tomcat = bp / "dependencies" / "tomcat" / "10.1.16" / "bin"
    tomcat.mkdir(parents=True)
    (tomcat / "catalina.sh").write_text("#!/bin/sh\n")
    return bp


class TestDependencyManifest:
    def test_default_version(self, buildpack: Path):
        manifest = DependencyManifest.load(buildpack)
        assert manifest.default_version("openjdk").version == "21.0.1"

    def test_single_version_is_default(self, buildpack: Path):
        assert DependencyManifest.load(buildpack).default_version("tomcat").version == "10.1.16"

    def test_unknown_dependency(self, buildpack: Path):
        with pytest.raises(InstallError, match="No dependency named"):
            DependencyManifest.load(buildpack).default_version("groovy")

    def test_ambiguous_without_default(self):
        manifest = DependencyManifest.model_validate(
            {"dependencies": [{"name": "x", "version": "1"}, {"name": "x", "version": "2"}]}
        )
        with pytest.raises(InstallError, match="No default version"):
            manifest.default_version("x")

    def test_missing_manifest_is_empty(self, tmp_path: Path):
        assert DependencyManifest.load(tmp_path).dependencies == []
        assert DependencyManifest.load(None).dependencies == []

    def test_invalid_manifest(self, tmp_path: Path):
        (tmp_path / "manifest.yml").write_text("dependencies: [{version: 1}]\n")
        with pytest.raises(InstallError, match="Invalid"):
            DependencyManifest.load(tmp_path)


class TestManifestInstaller:
    def test_install_copies_offline_dependency(self, buildpack: Path, tmp_path: Path):
        dest = tmp_path / "deps" / "0" / "tomcat"
        dep = ManifestInstaller(buildpack).install("tomcat", dest)
        assert dep.version == "10.1.16"
        assert (dest / "bin" / "catalina.sh").is_file()

    def test_reinstall_replaces(self, buildpack: Path, tmp_path: Path):
        dest = tmp_path / "tomcat"
        dest.mkdir()
        (dest / "stale").write_text("")
        ManifestInstaller(buildpack).install("tomcat", dest)
        assert not (dest / "stale").exists()

    def test_missing_artifacts(self, buildpack: Path, tmp_path: Path):
        with pytest.raises(InstallError, match="not available"):
            ManifestInstaller(buildpack).install("openjdk", tmp_path / "jre")

    def test_no_buildpack_dir(self, tmp_path: Path):
        with pytest.raises(InstallError):
            ManifestInstaller(None).install("openjdk", tmp_path / "jre")

    def test_download_failure(self, tmp_path: Path):
        dest = tmp_path / "agent.jar"
        with pytest.raises(InstallError, match="Failed to download"):
            ManifestInstaller(None).download("http://127.0.0.1:9/agent.jar", dest)
        assert not dest.exists()
