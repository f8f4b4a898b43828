"""Tests for discovery of pre-existing packages."""

from depgraph.models import FromExtensionDir, FromOutput
from depgraph.preload import load_existing, scan_directory
from depgraph.versioning.semver import SemanticVersion


def make_artifact(root, name, filename):
    path = root / "nodePackages" / name
    path.mkdir(parents=True, exist_ok=True)
    artifact = path / filename
    artifact.write_text("{}")
    return str(artifact)


class TestScanDirectory:
    """Test scanning one directory."""

    def test_plain_and_scoped_packages(self, tmp_path):
        """Test both name layouts are found."""
        make_artifact(tmp_path, "left-pad", "1.3.0.nix")
        make_artifact(tmp_path, "@types/node", "18.0.0.nix")
        scanned = scan_directory(str(tmp_path))
        assert set(scanned) == {"left-pad", "@types/node"}
        assert SemanticVersion.parse("18.0.0") in scanned["@types/node"]

    def test_skips_non_version_files(self, tmp_path):
        """Test latest.nix and default.nix style files are ignored."""
        make_artifact(tmp_path, "a", "1.0.0.nix")
        make_artifact(tmp_path, "a", "latest.nix")
        make_artifact(tmp_path, "a", "1.0.0.json")
        make_artifact(tmp_path, "b", "default.nix")
        scanned = scan_directory(str(tmp_path))
        assert list(scanned) == ["a"]
        assert list(scanned["a"]) == [SemanticVersion.parse("1.0.0")]

    def test_missing_directory(self, tmp_path):
        """Test a directory without packages yields nothing."""
        assert scan_directory(str(tmp_path / "none")) == {}


class TestLoadExisting:
    """Test combining output and extension directories."""

    def test_output_overrides_extensions(self, tmp_path):
        """Test output directory entries win over extension entries."""
        out = tmp_path / "out"
        ext = tmp_path / "ext"
        out_artifact = make_artifact(out, "a", "1.0.0.nix")
        make_artifact(ext, "a", "1.0.0.nix")
        ext_artifact = make_artifact(ext, "b", "2.0.0.nix")

        store = load_existing(str(out), {"mylib": str(ext)})

        assert store.lookup("a", SemanticVersion.parse("1.0.0")) == FromOutput(out_artifact)
        assert store.lookup("b", SemanticVersion.parse("2.0.0")) == FromExtensionDir("mylib", ext_artifact)

    def test_nothing_configured(self):
        """Test an empty store without directories."""
        assert len(load_existing()) == 0
