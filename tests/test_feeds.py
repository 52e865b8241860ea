import json
from datetime import datetime, timezone

import pytest

from fakes import JIRA_URL, MINECRAFT_URL, jira_versions, minecraft_manifest
from versionwatch.errors import FetchError, ParseError
from versionwatch.feeds.formatters import format_jira_version, format_minecraft_version
from versionwatch.feeds.models import VersionRecord
from versionwatch.feeds.sources import jira_feed, minecraft_feed


def _raw(payload):
    return json.dumps(payload).encode("utf-8")


def test_minecraft_manifest_parsing():
    feed = minecraft_feed(MINECRAFT_URL)
    records = feed.parse(_raw(minecraft_manifest(("20w51a", "snapshot"), ("1.16.4", "release"))))

    assert [r.id for r in records] == ["20w51a", "1.16.4"]
    assert records[0].kind == "snapshot"
    assert records[0].feed == "minecraft"
    assert records[1].release_time == datetime(2020, 12, 16, 15, 59, 57, tzinfo=timezone.utc)


def test_jira_versions_use_name_as_identifier():
    payload = jira_versions("1.16.4")
    payload[0]["releaseDate"] = "2020-11-02"
    payload[0]["released"] = True

    records = jira_feed(JIRA_URL).parse(_raw(payload))

    assert records[0].id == "1.16.4"
    assert records[0].released is True
    assert records[0].release_time == datetime(2020, 11, 2)


def test_placeholder_pattern():
    feed = jira_feed(JIRA_URL)
    records = feed.parse(_raw(jira_versions("Future Version - 1.17+", "1.17")))

    assert feed.is_placeholder(records[0])
    assert not feed.is_placeholder(records[1])
    assert not minecraft_feed(MINECRAFT_URL).is_placeholder(records[0])


def test_custom_placeholder_pattern():
    feed = jira_feed(JIRA_URL, placeholder_pattern=r"^Unreleased")
    records = feed.parse(_raw(jira_versions("Unreleased 1.18", "Future Version - 1.17+")))

    assert feed.is_placeholder(records[0])
    assert not feed.is_placeholder(records[1])


@pytest.mark.parametrize(
    "feed,raw",
    [
        (minecraft_feed(MINECRAFT_URL), b"\xff\xfe"),
        (minecraft_feed(MINECRAFT_URL), b"not json"),
        (minecraft_feed(MINECRAFT_URL), _raw([{"id": "1.16.4", "type": "release"}])),
        (minecraft_feed(MINECRAFT_URL), _raw({"versions": [{"type": "release"}]})),
        (jira_feed(JIRA_URL), _raw({"versions": []})),
        (jira_feed(JIRA_URL), _raw([{"id": "1"}])),
    ],
)
def test_bad_payloads_raise_parse_error(feed, raw):
    with pytest.raises(ParseError):
        feed.parse(raw)


def test_parse_error_is_a_fetch_error():
    assert issubclass(ParseError, FetchError)


def test_announcement_texts():
    mc = VersionRecord(id="21w03a", feed="minecraft", name="21w03a", kind="snapshot")
    jira = VersionRecord(id="1.16.5", feed="jira", name="1.16.5")

    assert format_minecraft_version(mc) == "A new snapshot version of minecraft was just released! : 21w03a"
    assert format_jira_version(jira) == "A new version (1.16.5) has been added to the minecraft issue tracker!"


def test_records_are_immutable():
    record = VersionRecord(id="1.16.5", feed="jira", name="1.16.5")

    with pytest.raises(TypeError):
        record.name = "1.17"
