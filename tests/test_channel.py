import datetime
import pathlib
import tempfile
import unittest

from pagefeed.channel import ChannelOverrides, configure_channel, read_base_hostname
from pagefeed.feed import Channel, Image
from pagefeed.report import RunReport

NOW = datetime.datetime(2024, 5, 10, 8, 0, 0, tzinfo=datetime.timezone.utc)


def _no_hostname():
    return None


class ConfigureChannelTests(unittest.TestCase):
    def test_overrides_replace_loaded_values(self) -> None:
        channel = Channel(title="Old", description="Old desc", link="https://old.example/", language="de")
        overrides = ChannelOverrides(
            title="New",
            description="New desc",
            base_url="https://new.example/",
            language="en",
        )

        configure_channel(channel, overrides, base_hostname=_no_hostname, now=NOW)

        self.assertEqual(channel.title, "New")
        self.assertEqual(channel.description, "New desc")
        self.assertEqual(channel.link, "https://new.example/")
        self.assertEqual(channel.language, "en")

    def test_empty_title_and_description_warn(self) -> None:
        report = RunReport()
        channel = Channel(link="https://example.com/")

        configure_channel(channel, ChannelOverrides(), base_hostname=_no_hostname, now=NOW, report=report)

        self.assertIn("Empty channel title.", report.warnings)
        self.assertIn("Empty channel description.", report.warnings)
        self.assertNotIn("Empty channel link.", report.warnings)

    def test_link_derived_from_hostname(self) -> None:
        channel = Channel(title="T", description="D")

        configure_channel(channel, ChannelOverrides(), base_hostname=lambda: "example.com", now=NOW)

        self.assertEqual(channel.link, "https://example.com/")

    def test_loaded_link_kept_without_asking_for_hostname(self) -> None:
        def fail():
            raise AssertionError("hostname should not be read")

        channel = Channel(title="T", description="D", link="https://kept.example/")
        configure_channel(channel, ChannelOverrides(), base_hostname=fail, now=NOW)
        self.assertEqual(channel.link, "https://kept.example/")

    def test_missing_hostname_leaves_link_empty(self) -> None:
        report = RunReport()
        channel = Channel(title="T", description="D")

        configure_channel(channel, ChannelOverrides(), base_hostname=_no_hostname, now=NOW, report=report)

        self.assertEqual(channel.link, "")
        self.assertEqual(report.warnings, ["Empty channel link."])

    def test_language_untouched_without_override(self) -> None:
        channel = Channel(title="T", description="D", link="https://example.com/", language="nl")
        configure_channel(channel, ChannelOverrides(), base_hostname=_no_hostname, now=NOW)
        self.assertEqual(channel.language, "nl")

        bare = Channel(title="T", description="D", link="https://example.com/")
        configure_channel(bare, ChannelOverrides(), base_hostname=_no_hostname, now=NOW)
        self.assertIsNone(bare.language)

    def test_build_date_always_refreshed(self) -> None:
        channel = Channel(title="T", description="D", link="https://example.com/", last_build_date="long ago")
        configure_channel(channel, ChannelOverrides(), base_hostname=_no_hostname, now=NOW)
        self.assertEqual(channel.last_build_date, "Fri, 10 May 2024 08:00:00 +0000")

    def test_icon_recomputed_from_title_and_link(self) -> None:
        channel = Channel(
            title="Old",
            description="D",
            link="https://example.com/",
            image=Image(url="https://elsewhere.example/icon.gif", title="Stale", link="https://elsewhere.example/"),
        )

        configure_channel(
            channel,
            ChannelOverrides(title="Blog", favicon="img/icon.png"),
            base_hostname=_no_hostname,
            now=NOW,
        )

        self.assertEqual(
            channel.image,
            Image(url="https://example.com/img/icon.png", title="Blog", link="https://example.com/"),
        )


class ReadBaseHostnameTests(unittest.TestCase):
    def test_reads_trimmed_hostname(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "CNAME"
            path.write_text("example.com\n", encoding="utf-8")
            self.assertEqual(read_base_hostname(path), "example.com")

    def test_missing_or_blank_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "CNAME"
            self.assertIsNone(read_base_hostname(path))
            path.write_text("  \n", encoding="utf-8")
            self.assertIsNone(read_base_hostname(path))


if __name__ == "__main__":
    unittest.main()
