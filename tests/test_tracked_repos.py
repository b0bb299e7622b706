"""Tests for the tracked repository file."""

import pytest

from github_activity_tracker.tracked_repos import TrackedRepositories


@pytest.fixture
def repos_file(tmp_path):
    path = tmp_path / "config.properties"
    path.write_text(
        "# tracked repositories\n"
        "prebid/prebid-server=prebid/prebid-server\n"
        "\n"
        "prebid/Prebid.js=prebid/Prebid.js\n"
        "not-a-repo=not-a-repo\n"
        "prebid/prebid-server=prebid/prebid-server\n",
        encoding="utf-8",
    )
    return path


class TestLoad:
    def test_load_skips_comments_invalid_and_duplicates(self, repos_file):
        tracked = TrackedRepositories(repos_file)
        assert tracked.load() == ["prebid/prebid-server", "prebid/Prebid.js"]

    def test_missing_file_is_empty(self, tmp_path):
        assert TrackedRepositories(tmp_path / "missing.properties").load() == []

    def test_entries_keep_raw_pairs(self, repos_file):
        entries = TrackedRepositories(repos_file).entries()
        assert entries[0] == ("prebid/prebid-server", "prebid/prebid-server")
        assert ("not-a-repo", "not-a-repo") in entries


class TestAddRemove:
    def test_add_appends_entry(self, tmp_path):
        path = tmp_path / "config.properties"
        tracked = TrackedRepositories(path)

        assert tracked.add("prebid/prebid-server") is True
        assert path.read_text(encoding="utf-8") == "prebid/prebid-server=prebid/prebid-server\n"
        assert tracked.contains("prebid/prebid-server")

    def test_add_existing_returns_false(self, repos_file):
        tracked = TrackedRepositories(repos_file)
        assert tracked.add("prebid/Prebid.js") is False

    def test_add_rejects_invalid_name(self, tmp_path):
        tracked = TrackedRepositories(tmp_path / "config.properties")
        with pytest.raises(ValueError):
            tracked.add("just-a-name")

    def test_remove_drops_every_line_for_repo(self, repos_file):
        tracked = TrackedRepositories(repos_file)

        assert tracked.remove("prebid/prebid-server") is True
        assert tracked.load() == ["prebid/Prebid.js"]
        assert "# tracked repositories" in repos_file.read_text(encoding="utf-8")

    def test_remove_unknown_returns_false(self, repos_file):
        assert TrackedRepositories(repos_file).remove("prebid/unknown") is False
