import json

import pytest

from a11y_auditor import ignore as ignore_module
from a11y_auditor.main import (
    clamp_timeout,
    ignore_main,
    main,
    output_name,
    parse_arguments,
    validate_url,
)


class TestValidateUrl:

    def test_accepts_http_and_https(self):
        assert validate_url(' https://example.com/page ') == 'https://example.com/page'
        assert validate_url('http://localhost:8080') == 'http://localhost:8080'

    @pytest.mark.parametrize('url', [
        'ftp://example.com',
        'example.com',
        'javascript:alert(1)',
        'https://example.com/?q=<script>',
        'https://example.com/?next=data:text/html',
        'https://' + 'a' * 2050 + '.com',
        'https://',
    ])
    def test_rejects(self, url):
        with pytest.raises(ValueError):
            validate_url(url)


class TestHelpers:

    def test_clamp_timeout(self):
        assert clamp_timeout(100) == 5000
        assert clamp_timeout(30000) == 30000
        assert clamp_timeout(10 ** 7) == 120000

    def test_output_name(self):
        assert output_name('https://www.example.com/about?x=1') == 'www.example.com'
        assert output_name('file:///tmp/site/index.html') == 'index'

    def test_requires_a_page(self):
        with pytest.raises(SystemExit):
            parse_arguments([])

    def test_repeatable_sources(self):
        args = parse_arguments(['--url', 'https://a.com', '-u', 'https://b.com', '--level', 'AAA'])
        assert args.url == ['https://a.com', 'https://b.com']
        assert args.level == 'AAA'


class TestMain:

    @pytest.mark.asyncio
    async def test_audits_a_local_file(self, tmp_path):
        page = tmp_path / 'index.html'
        page.write_text(
            '<html><body><main><h1>Home</h1><img src="a.png"></main></body></html>',
            encoding='utf-8',
        )
        output = tmp_path / 'reports'

        code = await main([
            '--html', str(page),
            '--output', str(output),
            '--ignore-file', str(tmp_path / 'ignore.json'),
            '--quiet',
        ])

        assert code == 0
        document = json.loads((output / 'index_findings.json').read_text(encoding='utf-8'))
        assert document['wcagLevel'] == 'AA'
        [result] = document['pages']
        assert result['url'].startswith('file://')
        types = [i['type'] for i in result['results']['images']['issues']]
        assert types == ['missing_alt_text']

    @pytest.mark.asyncio
    async def test_invalid_url_fails(self, tmp_path):
        code = await main(['--url', 'javascript:alert(1)', '--output', str(tmp_path), '--quiet'])
        assert code == 1

    @pytest.mark.asyncio
    async def test_unreadable_html_file_fails(self, tmp_path):
        code = await main(['--html', str(tmp_path / 'missing.html'),
                           '--output', str(tmp_path), '--quiet'])
        assert code == 1


class TestIgnoreMain:

    def test_adds_rule(self, tmp_path):
        path = tmp_path / 'ignore.json'
        code = ignore_main(['--domain', 'example.com', '--type', 'missing_skip_links',
                            '--expiry', '2030-01-01', '--ignore-file', str(path)])
        assert code == 0
        [rule] = json.loads(path.read_text(encoding='utf-8'))['rules']
        assert rule == {'domain': 'example.com', 'type': 'missing_skip_links', 'expiry': '2030-01-01'}

    def test_duplicate_id_is_not_an_error(self, tmp_path):
        path = str(tmp_path / 'ignore.json')
        assert ignore_main(['--id', '0000abcd', '--ignore-file', path]) == 0
        assert ignore_main(['--id', '0000abcd', '--ignore-file', path]) == 0

    def test_rule_that_identifies_nothing(self, tmp_path):
        code = ignore_main(['--text-includes', 'x', '--ignore-file', str(tmp_path / 'i.json')])
        assert code == 2

    def test_invalid_rule(self, tmp_path):
        code = ignore_main(['--id', '0000abcd', '--expiry', 'soon',
                            '--ignore-file', str(tmp_path / 'i.json')])
        assert code == 3

    def test_unwritable_store_fails(self, tmp_path, monkeypatch):
        def refuse(*args, **kwargs):
            raise PermissionError("read-only file system")

        monkeypatch.setattr(ignore_module, 'open', refuse, raising=False)
        code = ignore_main(['--id', '0000abcd', '--ignore-file', str(tmp_path / 'i.json')])
        assert code == 1

    def test_unknown_option(self):
        assert ignore_main(['--bogus']) == 2
