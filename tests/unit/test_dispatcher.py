"""Tests for the dispatcher."""
import io
import json
import logging

import pytest

from bins.core.config import Config, DefaultsConfig, GeneralConfig, SafetyConfig
from bins.core.dispatcher import Bins, is_url
from bins.core.exceptions import (
    ConfigError,
    DisallowedFile,
    IdExtractionError,
    IoError,
    SizeLimitExceeded,
    UnknownBackend,
    UnknownHost,
    UnsupportedFeature,
    UsageError,
)
from bins.core.features import Feature
from bins.core.files import PasteFile
from bins.core.options import CommandLineOptions, UrlOutputMode
from bins.core.range import RangeSelector


def make_bins(config=None, bins=(), stdin=None, http=None, **options):
    """Dispatcher around the given bins with options from kwargs."""
    return Bins(
        config or Config.default(),
        CommandLineOptions(**options),
        bins=bins if isinstance(bins, dict) else list(bins),
        http=http,
        stdin=stdin or io.StringIO(''),
    )


class TestIsUrl:
    """Test suite for is_url."""

    @pytest.mark.parametrize("text", ["https://gist.github.com/abc", "http://sprunge.us/x"])
    def test_urls(self, text):
        assert is_url(text)

    @pytest.mark.parametrize("text", ["notes.txt", "/tmp/notes.txt", "C:\\notes.txt", "mailto:x", ""])
    def test_not_urls(self, text):
        assert not is_url(text)


class TestListBins:
    """Test suite for --list-bins."""

    @pytest.mark.asyncio
    async def test_plain(self, make_bin, http):
        dispatcher = make_bins(
            bins=[make_bin('zeta', 'z.raw', 'z.html'), make_bin('alpha', 'a.raw', 'a.html')],
            http=http,
            list_bins=True,
        )

        assert await dispatcher.main() == "alpha\nzeta"
        http.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_json(self, make_bin, http):
        dispatcher = make_bins(bins=[make_bin('alpha', 'a.raw', 'a.html')], http=http, list_bins=True, json=True)

        assert json.loads(await dispatcher.main()) == ['alpha']

    def test_duplicate_hosts_rejected(self, make_bin):
        with pytest.raises(ConfigError, match="hostname"):
            make_bins(bins=[make_bin('a', 'same.test', 'a.html'), make_bin('b', 'same.test', 'b.html')])


class TestUpload:
    """Test suite for uploads."""

    @pytest.mark.asyncio
    async def test_message_upload(self, make_bin, http, caplog):
        """Test a 5-byte message to a public anonymous bin yields one URL and no warnings."""
        fake = make_bin()
        dispatcher = make_bins(bins=[fake], http=http, bin='fake', message='hello')

        with caplog.at_level(logging.WARNING, logger='bins'):
            output = await dispatcher.main()

        assert output == 'https://fake.test/p1'
        assert len(fake.uploads) == 1 and len(fake.uploads[0]) == 1
        assert fake.uploads[0][0].name == 'message'
        assert fake.uploads[0][0].size == 5
        assert caplog.records == []

    @pytest.mark.asyncio
    async def test_default_bin_from_config(self, make_bin, http):
        config = Config(defaults=DefaultsConfig(bin='fake'))
        fake = make_bin()

        await make_bins(config=config, bins=[fake], http=http, message='x').main()

        assert len(fake.uploads) == 1

    @pytest.mark.asyncio
    async def test_no_bin(self, make_bin, http):
        with pytest.raises(UsageError, match="no bin was specified"):
            await make_bins(bins=[make_bin()], http=http, message='x').main()
        http.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_blank_default_bin(self, make_bin, http):
        config = Config(defaults=DefaultsConfig(bin='  '))

        with pytest.raises(UsageError):
            await make_bins(config=config, bins=[make_bin()], http=http, message='x').main()

    @pytest.mark.asyncio
    async def test_unknown_bin(self, make_bin, http):
        with pytest.raises(UnknownBackend, match='there is no bin called "nope"'):
            await make_bins(bins=[make_bin()], http=http, bin='nope', message='x').main()

    @pytest.mark.asyncio
    async def test_range_with_upload(self, make_bin, http):
        """Test ranges are download-only."""
        with pytest.raises(UsageError, match="cannot upload with --range"):
            await make_bins(bins=[make_bin()], http=http, bin='fake', message='x', range=RangeSelector.parse('1')).main()

    @pytest.mark.asyncio
    async def test_unsupported_feature_stops_before_upload(self, make_bin, http, strict_config):
        fake = make_bin()

        with pytest.raises(UnsupportedFeature):
            await make_bins(config=strict_config, bins=[fake], http=http, bin='fake', message='x', private=True).main()

        assert fake.uploads == []

    @pytest.mark.asyncio
    async def test_unsupported_feature_forced(self, make_bin, http, strict_config, caplog):
        fake = make_bin()
        dispatcher = make_bins(config=strict_config, bins=[fake], http=http, bin='fake', message='x', private=True, force=True)

        with caplog.at_level(logging.WARNING, logger='bins'):
            await dispatcher.main()

        assert len(fake.uploads) == 1
        assert "does not support private pastes" in caplog.text

    @pytest.mark.asyncio
    async def test_stdin_upload(self, make_bin, http):
        fake = make_bin()

        await make_bins(bins=[fake], http=http, bin='fake', stdin=io.StringIO('from stdin')).main()

        assert fake.uploads[0][0].name == 'stdin'
        assert fake.uploads[0][0].content == 'from stdin'

    @pytest.mark.asyncio
    async def test_file_upload(self, make_bin, http, tmp_path):
        first = tmp_path / 'first.py'
        first.write_text('print(1)')
        second = tmp_path / 'second.md'
        second.write_text('# hi')
        fake = make_bin()

        await make_bins(bins=[fake], http=http, bin='fake', inputs=(str(first), str(second))).main()

        assert [(f.name, f.content) for f in fake.uploads[0]] == [('first.py', 'print(1)'), ('second.md', '# hi')]

    @pytest.mark.asyncio
    async def test_files_win_over_stdin(self, make_bin, http, tmp_path):
        path = tmp_path / 'a.txt'
        path.write_text('file')
        fake = make_bin()

        await make_bins(bins=[fake], http=http, bin='fake', inputs=(str(path),), stdin=io.StringIO('stdin')).main()

        assert fake.uploads[0][0].content == 'file'

    @pytest.mark.asyncio
    async def test_missing_file(self, make_bin, http, tmp_path):
        with pytest.raises(IoError, match="could not open"):
            await make_bins(bins=[make_bin()], http=http, bin='fake', inputs=(str(tmp_path / 'missing.txt'),)).main()

    @pytest.mark.asyncio
    async def test_name_override(self, make_bin, http):
        fake = make_bin(features=[Feature.PUBLIC, Feature.SINGLE_NAMING])

        await make_bins(bins=[fake], http=http, bin='fake', message='x', name='notes.md').main()

        assert fake.uploads[0][0].name == 'notes.md'

    @pytest.mark.asyncio
    async def test_name_override_multiple_files(self, make_bin, http, tmp_path):
        paths = []
        for n in ('a.txt', 'b.txt'):
            (tmp_path / n).write_text(n)
            paths.append(str(tmp_path / n))
        fake = make_bin()

        with pytest.raises(UsageError, match="--name with multiple"):
            await make_bins(bins=[fake], http=http, bin='fake', inputs=tuple(paths), name='x').main()
        assert fake.uploads == []

    @pytest.mark.asyncio
    async def test_size_limit_exceeded(self, make_bin, http, tmp_path):
        path = tmp_path / 'big.txt'
        path.write_text('x' * 11)
        config = Config(general=GeneralConfig(file_size_limit='10b'))
        fake = make_bin()

        with pytest.raises(SizeLimitExceeded, match="big.txt is 11 bytes, which is over the size limit of 10 bytes"):
            await make_bins(config=config, bins=[fake], http=http, bin='fake', inputs=(str(path),)).main()
        assert fake.uploads == []

    @pytest.mark.asyncio
    async def test_size_limit_forced(self, make_bin, http, tmp_path, caplog):
        path = tmp_path / 'big.txt'
        path.write_text('x' * 11)
        config = Config(general=GeneralConfig(file_size_limit='10b'))
        fake = make_bin()

        with caplog.at_level(logging.WARNING, logger='bins'):
            await make_bins(config=config, bins=[fake], http=http, bin='fake', inputs=(str(path),), force=True).main()

        assert len(fake.uploads) == 1
        assert "over the 10 bytes limit" in caplog.text

    @pytest.mark.asyncio
    async def test_size_limit_ignores_message(self, make_bin, http):
        """Test the limit only applies to files."""
        config = Config(general=GeneralConfig(file_size_limit='1b'))
        fake = make_bin()

        await make_bins(config=config, bins=[fake], http=http, bin='fake', message='longer than one byte').main()

        assert len(fake.uploads) == 1

    def test_invalid_size_limit(self, make_bin):
        config = Config(general=GeneralConfig(file_size_limit='ten'))

        with pytest.raises(ConfigError):
            make_bins(config=config, bins=[make_bin()])

    @pytest.mark.asyncio
    async def test_disallowed_pattern(self, make_bin, http, tmp_path):
        path = tmp_path / 'server.key'
        path.write_text('secret')
        config = Config(safety=SafetyConfig(disallowed_file_patterns=('*.key',)))

        with pytest.raises(DisallowedFile, match="server.key"):
            await make_bins(config=config, bins=[make_bin()], http=http, bin='fake', inputs=(str(path),)).main()

    @pytest.mark.asyncio
    async def test_disallowed_pattern_forced(self, make_bin, http, tmp_path):
        path = tmp_path / 'server.key'
        path.write_text('secret')
        config = Config(safety=SafetyConfig(disallowed_file_patterns=('*.key',)))
        fake = make_bin()

        await make_bins(config=config, bins=[fake], http=http, bin='fake', inputs=(str(path),), force=True).main()

        assert fake.uploads[0][0].content == 'secret'

    @pytest.mark.asyncio
    async def test_raw_urls_formatted(self, make_bin, http):
        """Test page URLs are turned into raw URLs without a network call."""
        class HtmlOnly(make_bin):
            async def upload(self, files, prefer_html_url):
                return await super().upload(files, True)

        fake = HtmlOnly()

        output = await make_bins(bins=[fake], http=http, bin='fake', message='x', url_output=UrlOutputMode.RAW).main()

        assert output == 'https://raw.fake.test/p1'

    @pytest.mark.asyncio
    async def test_raw_urls_created(self, make_bin, http):
        """Test bins without format_raw_url fall back to create_raw_url."""
        class HtmlOnly(make_bin):
            async def upload(self, files, prefer_html_url):
                return await super().upload(files, True)

        fake = HtmlOnly(formats_raw=False, pastes={'p1': [PasteFile('a', '1'), PasteFile('b', '2')]})

        output = await make_bins(bins=[fake], http=http, bin='fake', message='x', url_output=UrlOutputMode.RAW).main()

        assert output == 'https://raw.fake.test/p1-0\nhttps://raw.fake.test/p1-1'

    @pytest.mark.asyncio
    async def test_raw_urls_already_raw(self, make_bin, http):
        """Test URLs that are already raw are kept."""
        fake = make_bin()

        output = await make_bins(bins=[fake], http=http, bin='fake', message='x', url_output=UrlOutputMode.RAW).main()

        assert output == 'https://raw.fake.test/p1'


class TestDownload:
    """Test suite for downloads."""

    @pytest.mark.asyncio
    async def test_raw_host_routing(self, fake_bin, make_bin, http):
        """Test a raw-host URL selects the bin and its raw ID parser."""
        other = make_bin('other', 'raw.other.test', 'other.test')

        output = await make_bins(bins=[other, fake_bin], http=http, inputs=('https://raw.fake.test/solo',)).main()

        assert output == 'just one'
        assert fake_bin.downloads[0][0] == 'solo'

    @pytest.mark.asyncio
    async def test_html_host_routing(self, fake_bin, http):
        output = await make_bins(bins=[fake_bin], http=http, inputs=('https://fake.test/solo',)).main()

        assert output == 'just one'

    @pytest.mark.asyncio
    async def test_raw_host_takes_precedence(self, make_bin, http):
        """Test a host that is one bin's raw host and another's page host."""
        raw_owner = make_bin('raw', 'shared.test', 'raw-pages.test', pastes={'x': [PasteFile('x', 'raw')]})
        html_owner = make_bin('html', 'html-raw.test', 'shared.test', pastes={'x': [PasteFile('x', 'html')]})
        # passed as a mapping, so the hostname clash is not rejected
        bins = {'html': html_owner, 'raw': raw_owner}

        output = await make_bins(bins=bins, http=http, inputs=('https://shared.test/x',)).main()

        assert output == 'raw'

    @pytest.mark.asyncio
    async def test_same_host_falls_back_to_html_parser(self, make_bin, http):
        class PageIds(make_bin):
            def id_from_raw_url(self, url):
                return None

        fake = PageIds(raw_host='same.test', html_host='same.test', pastes={'abc': [PasteFile('abc', 'ok')]})

        output = await make_bins(bins=[fake], http=http, inputs=('https://same.test/abc',)).main()

        assert output == 'ok'

    @pytest.mark.asyncio
    async def test_unknown_host(self, fake_bin, http):
        with pytest.raises(UnknownHost, match="no bin uses the hostname example.org"):
            await make_bins(bins=[fake_bin], http=http, inputs=('https://example.org/abc',)).main()

    @pytest.mark.asyncio
    async def test_id_extraction_failure(self, fake_bin, http):
        with pytest.raises(IdExtractionError):
            await make_bins(bins=[fake_bin], http=http, inputs=('https://fake.test/too/deep',)).main()

    @pytest.mark.asyncio
    async def test_range_selection(self, fake_bin, http):
        """Test '1,-1' picks two files in ascending index order."""
        output = await make_bins(
            bins=[fake_bin], http=http, inputs=('https://fake.test/trio',), range=RangeSelector.parse('-1,1'), json=True
        ).main()

        assert [f['name'] for f in json.loads(output)] == ['two.txt', 'three.txt']

    @pytest.mark.asyncio
    async def test_range_out_of_bounds(self, fake_bin, http):
        with pytest.raises(UsageError, match="out of bounds"):
            await make_bins(bins=[fake_bin], http=http, inputs=('https://fake.test/trio',), range=RangeSelector.parse('5')).main()

    @pytest.mark.asyncio
    async def test_name_selection(self, fake_bin, http):
        output = await make_bins(bins=[fake_bin], http=http, inputs=('https://fake.test/trio', 'three.txt', 'one.txt')).main()

        assert output == "==> one.txt <==\n\nfirst\n==> three.txt <==\n\nthird"

    @pytest.mark.asyncio
    async def test_unknown_name(self, fake_bin, http):
        with pytest.raises(UsageError) as exc_info:
            await make_bins(bins=[fake_bin], http=http, inputs=('https://fake.test/trio', 'nope.txt')).main()

        assert exc_info.value.causes == ['no file named nope.txt']

    @pytest.mark.asyncio
    async def test_names_and_range(self, fake_bin, http):
        with pytest.raises(UsageError, match="cannot specify file names with --range"):
            await make_bins(
                bins=[fake_bin], http=http, inputs=('https://fake.test/trio', 'one.txt'), range=RangeSelector.parse('0')
            ).main()
        assert fake_bin.downloads == []

    @pytest.mark.asyncio
    async def test_html_url_output(self, fake_bin, http):
        output = await make_bins(
            bins=[fake_bin], http=http, inputs=('https://raw.fake.test/trio',), url_output=UrlOutputMode.HTML
        ).main()

        assert output == 'https://fake.test/trio'
        assert fake_bin.downloads == []

    @pytest.mark.asyncio
    async def test_raw_url_output(self, fake_bin, http):
        output = await make_bins(
            bins=[fake_bin], http=http, inputs=('https://fake.test/solo',), url_output=UrlOutputMode.RAW
        ).main()

        assert output == 'https://raw.fake.test/solo-0'

    @pytest.mark.asyncio
    async def test_list_all(self, fake_bin, http):
        output = await make_bins(bins=[fake_bin], http=http, inputs=('https://fake.test/trio',), list_all=True).main()

        assert output == 'one.txt\ntwo.txt\nthree.txt'

    @pytest.mark.asyncio
    async def test_list_all_unknown_names(self, fake_bin, http):
        output = await make_bins(bins=[fake_bin], http=http, inputs=('https://fake.test/other',), list_all=True).main()

        assert output == '<unknown>'

    @pytest.mark.asyncio
    async def test_json_single(self, fake_bin, http):
        output = await make_bins(bins=[fake_bin], http=http, inputs=('https://fake.test/solo',), json=True).main()

        assert json.loads(output) == {'name': 'solo', 'content': 'just one'}

    @pytest.mark.asyncio
    async def test_output_directory(self, fake_bin, http, tmp_path):
        """Test downloads into a directory print nothing."""
        (tmp_path / 'one.txt').write_text('existing')

        output = await make_bins(bins=[fake_bin], http=http, inputs=('https://fake.test/trio',), output=str(tmp_path)).main()

        assert output == ''
        assert (tmp_path / 'one.txt').read_text() == 'existing'
        assert (tmp_path / 'one_1.txt').read_text() == 'first'
        assert (tmp_path / 'three.txt').read_text() == 'third'

    @pytest.mark.asyncio
    async def test_output_directory_missing(self, fake_bin, http, tmp_path):
        with pytest.raises(IoError, match="does not exist"):
            await make_bins(
                bins=[fake_bin], http=http, inputs=('https://fake.test/solo',), output=str(tmp_path / 'nope')
            ).main()
