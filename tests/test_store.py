"""Tests for the package store."""

from depgraph.models import (
    DistributionInfo,
    FromExistingOutput,
    FromExtension,
    FromExtensionDir,
    FromOutput,
    NewlyResolved,
    PackageMeta,
    ResolvedPackage,
    to_fully_defined,
)
from depgraph.store import PackageStore
from depgraph.versioning.semver import SemanticVersion


def v(text):
    return SemanticVersion.parse(text)


def resolved(name, version):
    return ResolvedPackage(
        name=name,
        version=v(version),
        dist=DistributionInfo(f"https://example.com/{name}-{version}.tgz", "0" * 40),
        meta=PackageMeta(),
    )


class TestPackageStore:
    """Test store operations."""

    def test_insert_and_lookup(self):
        """Test an inserted entry can be looked up."""
        store = PackageStore()
        store.insert("a", v("1.0.0"), "entry")
        assert store.lookup("a", v("1.0.0")) == "entry"
        assert store.member("a", v("1.0.0"))
        assert "a" in store
        assert store.lookup("a", v("2.0.0")) is None
        assert store.lookup("b", v("1.0.0")) is None

    def test_insert_overwrites(self):
        """Test at most one entry per (name, version)."""
        store = PackageStore()
        store.insert("a", v("1.0.0"), "old")
        store.insert("a", v("1.0.0+build"), "new")
        assert store.lookup("a", v("1.0.0")) == "new"
        assert len(store) == 1

    def test_delete_removes_empty_name(self):
        """Test deleting the last version forgets the name."""
        store = PackageStore()
        store.insert("a", v("1.0.0"), "x")
        store.insert("a", v("1.1.0"), "y")
        store.delete("a", v("1.0.0"))
        assert "a" in store
        store.delete("a", v("1.1.0"))
        assert "a" not in store
        store.delete("missing", v("1.0.0"))

    def test_versions_is_a_copy(self):
        """Test callers can't mutate the store through versions()."""
        store = PackageStore()
        store.insert("a", v("1.0.0"), "x")
        versions = store.versions("a")
        versions.clear()
        assert store.member("a", v("1.0.0"))
        assert store.versions("unknown") == {}

    def test_merge_overwrites(self):
        """Test the merged store wins on conflicts."""
        base = PackageStore()
        base.insert("a", v("1.0.0"), "base")
        base.insert("b", v("1.0.0"), "base")
        other = PackageStore()
        other.insert("a", v("1.0.0"), "other")
        base.merge(other)
        assert base.lookup("a", v("1.0.0")) == "other"
        assert base.lookup("b", v("1.0.0")) == "base"

    def test_map_values_returns_new_store(self):
        """Test map_values leaves the source untouched."""
        store = PackageStore()
        store.insert("a", v("1.0.0"), FromOutput("/out/a/1.0.0.nix"))
        store.insert("b", v("2.0.0"), FromExtensionDir("ext", "/ext/b/2.0.0.nix"))
        mapped = store.map_values(to_fully_defined)
        assert mapped.lookup("a", v("1.0.0")) == FromExistingOutput("/out/a/1.0.0.nix")
        assert mapped.lookup("b", v("2.0.0")) == FromExtension("ext", "/ext/b/2.0.0.nix")
        assert isinstance(store.lookup("a", v("1.0.0")), FromOutput)

    def test_new_packages(self):
        """Test only newly resolved entries are handed out."""
        store = PackageStore()
        package = resolved("a", "1.0.0")
        store.insert("a", v("1.0.0"), NewlyResolved(package))
        store.insert("b", v("1.0.0"), FromExistingOutput("/out/b"))
        assert list(store.new_packages()) == [package]

    def test_items_and_len(self):
        """Test iteration covers every (name, version)."""
        store = PackageStore()
        store.insert("a", v("1.0.0"), 1)
        store.insert("a", v("2.0.0"), 2)
        store.insert("b", v("1.0.0"), 3)
        assert len(store) == 3
        assert sorted(entry for _, _, entry in store.items()) == [1, 2, 3]
        assert sorted(store.names()) == ["a", "b"]


class TestStoreEntryDescriptions:
    """Test the provenance text logged on cache hits."""

    def test_describe(self):
        """Test each entry kind says where the version came from."""
        version = v("1.2.3")
        assert NewlyResolved(resolved("a", "1.2.3")).describe(version) == "fetched package version 1.2.3"
        assert "output directory" in FromExistingOutput("/x").describe(version)
        assert FromExtension("mylib", "/x").describe(version) == "version 1.2.3 provided by extension mylib"
