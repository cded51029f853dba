"""
oio/tests/test_items.py

Add (text, screenshot, file), list, extend, health, and download.
"""

import base64
from unittest.mock import MagicMock

import pytest
import requests

from oio.api.items import (
    MAX_FILE_TTL_SECS, MAX_TEXT_BYTES, Item, add_file, add_screenshot, add_text,
    calculate_ttl, download, extend_item, filter_items, health, list_items, sort_items,
)
from oio.errors import ApiError, NotFound, OioError, ProRequired, TransportError
from oio.upload import CompletedPart


class TestCalculateTTL:
    def test_permanent(self):
        assert calculate_ttl('7d', permanent=True) == 0

    def test_default_24h(self):
        assert calculate_ttl(None) == 86400

    def test_unparsable_falls_back(self):
        assert calculate_ttl('forever') == 86400

    def test_file_capped_at_seven_days(self):
        assert calculate_ttl('30d', is_file=True) == MAX_FILE_TTL_SECS

    def test_text_not_capped(self):
        assert calculate_ttl('30d') == 30 * 86400


# ── Add ───────────────────────────────────────────────────────────────────────

class TestAddText:
    def test_ttl_sent_as_integer(self, fake_client, response):
        fake_client.request.side_effect = [response(201, {'shortId': 'abc', 'expiresAt': 1700000000})]
        assert add_text(fake_client, 'hello', 3600) == {'shortId': 'abc', 'expiresAt': 1700000000}
        fake_client.request.assert_called_once_with(
            '/shorts', 'POST', body={'content': 'hello', 'ttl': 3600})

    def test_permanent_omits_ttl(self, fake_client, response):
        fake_client.request.side_effect = [response(201, {'shortId': 'abc'})]
        add_text(fake_client, 'hello', 0)
        assert fake_client.request.call_args.kwargs['body'] == {'content': 'hello'}

    def test_too_large_locally(self, fake_client):
        with pytest.raises(OioError, match='exceeds maximum size of 360KB'):
            add_text(fake_client, 'x' * (MAX_TEXT_BYTES + 1))
        fake_client.request.assert_not_called()

    def test_413(self, fake_client, response):
        fake_client.request.side_effect = [response(413, {'message': 'too big'})]
        with pytest.raises(ApiError, match='content too large: too big'):
            add_text(fake_client, 'hello')

    def test_other_failure(self, fake_client, response):
        fake_client.request.side_effect = [response(400, {'message': 'bad'})]
        with pytest.raises(ApiError, match='failed to create item: bad'):
            add_text(fake_client, 'hello')


class TestAddScreenshot:
    def test_uploads_base64_and_fetches_url(self, fake_client, response):
        fake_client.request.side_effect = [
            response(201, {'screenshotId': 'sc1', 'expiresAt': 5}),
            response(200, {'downloadUrl': 'https://dl/sc1'}),
        ]
        result = add_screenshot(fake_client, b'\x89PNG', 60)

        assert result == {'screenshotId': 'sc1', 'expiresAt': 5, 'downloadUrl': 'https://dl/sc1'}
        body = fake_client.request.call_args_list[0].kwargs['body']
        assert body == {'contentType': 'image/png',
                        'data': base64.b64encode(b'\x89PNG').decode(), 'ttl': '60s'}

    def test_permanent_still_sends_default_ttl(self, fake_client, response):
        fake_client.request.side_effect = [response(201, {'screenshotId': 'sc1'}), response(404)]
        result = add_screenshot(fake_client, b'img', 0)
        assert fake_client.request.call_args_list[0].kwargs['body']['ttl'] == '24h'
        assert result['downloadUrl'] == ''

    def test_url_lookup_failure_is_not_fatal(self, fake_client, response):
        fake_client.request.side_effect = [response(201, {'screenshotId': 'sc1'}), TransportError('down')]
        assert add_screenshot(fake_client, b'img')['screenshotId'] == 'sc1'


class TestAddFile:
    def _init(self, response):
        return response(201, {
            'shortId': 'f1', 'partSize': 4, 'expiresAt': 99,
            'presignedUrls': [{'partNumber': 1, 'url': 'u1'}, {'partNumber': 2, 'url': 'u2'}],
        })

    def test_init_upload_complete(self, fake_client, response, tmp_path):
        path = tmp_path / 'notes.txt'
        path.write_bytes(b'abcdefg')
        fake_client.request.side_effect = [self._init(response), response(200, {})]
        uploader = MagicMock()
        uploader.upload.return_value = [CompletedPart(1, 'e1'), CompletedPart(2, 'e2')]

        result = add_file(fake_client, str(path), 3600, uploader=uploader)

        assert result == {'shortId': 'f1', 'expiresAt': 99, 'parts': 2}
        init_call, complete_call = fake_client.request.call_args_list
        assert init_call.args[0] == '/shorts/file/init'
        assert init_call.kwargs['body'] == {
            'filename': 'notes.txt', 'contentType': 'text/plain', 'fileSize': 7, 'ttl': '3600s',
        }
        plan, data, _ = uploader.upload.call_args.args
        assert data == b'abcdefg'
        assert plan.part_size == 4
        assert complete_call.args[0] == '/shorts/file/complete'
        assert complete_call.kwargs['body'] == {
            'shortId': 'f1',
            'parts': [{'partNumber': 1, 'etag': 'e1'}, {'partNumber': 2, 'etag': 'e2'}],
        }

    def test_empty_file(self, fake_client, tmp_path):
        path = tmp_path / 'empty.bin'
        path.write_bytes(b'')
        with pytest.raises(OioError, match='empty file'):
            add_file(fake_client, str(path))
        fake_client.request.assert_not_called()

    def test_init_failure(self, fake_client, response, tmp_path):
        path = tmp_path / 'a.bin'
        path.write_bytes(b'x')
        fake_client.request.side_effect = [response(403, {'message': 'quota exceeded'})]
        with pytest.raises(ApiError, match='failed to initialize upload: quota exceeded'):
            add_file(fake_client, str(path), uploader=MagicMock())

    def test_init_body_not_an_object(self, fake_client, response, tmp_path):
        path = tmp_path / 'a.bin'
        path.write_bytes(b'x')
        fake_client.request.side_effect = [response(201, ['not', 'a', 'dict'])]
        with pytest.raises(ApiError, match='invalid init response'):
            add_file(fake_client, str(path), uploader=MagicMock())

    @pytest.mark.parametrize('entry', [{'url': 'u1'}, {'partNumber': 1}, 'u1',
                                       {'partNumber': 'one', 'url': 'u1'}])
    def test_malformed_part_entry(self, fake_client, response, tmp_path, entry):
        path = tmp_path / 'a.bin'
        path.write_bytes(b'x')
        fake_client.request.side_effect = [
            response(201, {'shortId': 'f1', 'partSize': 4, 'presignedUrls': [entry]}),
        ]
        uploader = MagicMock()
        with pytest.raises(ApiError, match='invalid init response'):
            add_file(fake_client, str(path), uploader=uploader)
        uploader.upload.assert_not_called()

    def test_upload_failure_skips_complete(self, fake_client, response, tmp_path):
        path = tmp_path / 'a.bin'
        path.write_bytes(b'abcdefg')
        fake_client.request.side_effect = [self._init(response)]
        uploader = MagicMock()
        uploader.upload.side_effect = OioError('part failed')
        with pytest.raises(OioError, match='part failed'):
            add_file(fake_client, str(path), uploader=uploader)
        assert fake_client.request.call_count == 1

    def test_complete_failure(self, fake_client, response, tmp_path):
        path = tmp_path / 'a.bin'
        path.write_bytes(b'abcdefg')
        fake_client.request.side_effect = [self._init(response), response(500, {'message': 'x'})]
        uploader = MagicMock()
        uploader.upload.return_value = []
        with pytest.raises(ApiError, match='failed to complete upload'):
            add_file(fake_client, str(path), uploader=uploader)


# ── List ──────────────────────────────────────────────────────────────────────

class TestListItems:
    def _route(self, response, broken=None):
        bodies = {
            '/shorts': {'shorts': [
                {'shortId': 's1', 'content': 'hello world', 'createdAt': '2026-01-02', 'expiresAt': 50},
                {'id': 's2', 'type': 'file', 'filename': 'a.pdf', 'fileSize': 900,
                 'createdAt': '2026-01-03', 'expiresAt': 0},
            ]},
            '/screenshots': {'screenshots': [
                {'screenshotId': 'sc1', 'size': 300, 'createdAt': '2026-01-01', 'expiresAt': 10},
            ]},
            '/files': {'files': [
                {'fileId': 'p1', 'filename': 'big.iso', 'size': 5000,
                 'createdAt': '2026-01-04', 'expiresAt': 20},
            ]},
        }

        def request(path, method='GET', **kwargs):
            if path == broken:
                raise TransportError('down')
            return response(200, bodies[path])
        return request

    def test_merges_three_sources(self, fake_client, response):
        fake_client.request.side_effect = self._route(response)
        items = list_items(fake_client)
        assert [(i.id, i.type, i.source) for i in items] == [
            ('s1', 'text', 'short'),
            ('s2', 'file', 'short'),
            ('sc1', 'screenshot', 'screenshot'),
            ('p1', 'profile', 'file'),
        ]
        assert items[0].size == len('hello world')
        assert items[0].preview == 'hello world'
        assert items[2].filename == 'screenshot-sc1'

    def test_failing_source_contributes_nothing(self, fake_client, response):
        fake_client.request.side_effect = self._route(response, broken='/screenshots')
        assert [i.id for i in list_items(fake_client)] == ['s1', 's2', 'p1']

    def test_non_200_source_contributes_nothing(self, fake_client, response):
        route = self._route(response)
        fake_client.request.side_effect = (
            lambda path, method='GET', **kw: response(403) if path == '/files' else route(path)
        )
        assert [i.id for i in list_items(fake_client)] == ['s1', 's2', 'sc1']

    def test_raw_dict_shape(self):
        item = Item('s1', 'text', 'short', preview='hi', size=2, expires_at=5, created_at='c')
        assert item.to_dict() == {'id': 's1', 'type': 'text', 'size': 2, 'expiresAt': 5,
                                  'createdAt': 'c', 'source': 'short', 'preview': 'hi'}


class TestFilterSort:
    ITEMS = [
        Item('a1', 'text', 'short', preview='Invoice March', size=10, expires_at=300, created_at='2026-01-02'),
        Item('b2', 'file', 'short', filename='report.pdf', size=500, expires_at=0, created_at='2026-01-03'),
        Item('c3', 'profile', 'file', filename='INVOICE.zip', size=90, expires_at=100, created_at='2026-01-01'),
    ]

    def test_type_filter(self):
        assert [i.id for i in filter_items(self.ITEMS, type='file')] == ['b2']

    def test_pro_alias(self):
        assert [i.id for i in filter_items(self.ITEMS, type='pro')] == ['c3']

    def test_bad_type(self):
        with pytest.raises(OioError, match='invalid type'):
            filter_items(self.ITEMS, type='video')

    def test_search_is_case_insensitive(self):
        assert [i.id for i in filter_items(self.ITEMS, search='invoice')] == ['a1', 'c3']

    def test_search_matches_id(self):
        assert [i.id for i in filter_items(self.ITEMS, search='B2')] == ['b2']

    def test_sort_date_newest_first(self):
        assert [i.id for i in sort_items(self.ITEMS)] == ['b2', 'a1', 'c3']

    def test_sort_size_largest_first(self):
        assert [i.id for i in sort_items(self.ITEMS, 'size')] == ['b2', 'c3', 'a1']

    def test_sort_expiry_permanent_last(self):
        assert [i.id for i in sort_items(self.ITEMS, 'expiry')] == ['c3', 'a1', 'b2']


# ── Extend / health / download ────────────────────────────────────────────────

class TestExtendItem:
    def test_ttl(self, fake_client, response):
        fake_client.request.side_effect = [response(200, {'expiresAt': 777})]
        assert extend_item(fake_client, 'abc', ttl='7d') == 777
        fake_client.request.assert_called_once_with('/shorts/abc', 'PATCH', body={'ttl': '7d'})

    def test_permanent(self, fake_client, response):
        fake_client.request.side_effect = [response(200, {})]
        assert extend_item(fake_client, 'abc', permanent=True) == 0
        assert fake_client.request.call_args.kwargs['body'] == {'permanent': True}

    def test_needs_exactly_one_option(self, fake_client):
        with pytest.raises(OioError, match='either --ttl'):
            extend_item(fake_client, 'abc')
        with pytest.raises(OioError, match='both'):
            extend_item(fake_client, 'abc', ttl='1h', permanent=True)
        fake_client.request.assert_not_called()

    @pytest.mark.parametrize('status, exc', [(404, NotFound), (403, ProRequired), (400, ApiError),
                                             (500, ApiError)])
    def test_status_mapping(self, fake_client, response, status, exc):
        fake_client.request.side_effect = [response(status, {'message': 'm'})]
        with pytest.raises(exc):
            extend_item(fake_client, 'abc', ttl='1h')


class TestHealth:
    def test_no_auth(self, fake_client, response):
        fake_client.request.side_effect = [response(200, {'status': 'ok'})]
        assert health(fake_client) == {'status': 'ok'}
        fake_client.request.assert_called_once_with('/health', 'GET', require_auth=False)

    def test_failure(self, fake_client, response):
        fake_client.request.side_effect = [response(503)]
        with pytest.raises(ApiError, match='status 503'):
            health(fake_client)


class TestDownload:
    def _http(self, status=200, chunks=(b'ab', b'', b'cd')):
        res = MagicMock()
        res.status_code = status
        res.iter_content.return_value = list(chunks)
        res.__enter__.return_value = res
        http = MagicMock()
        http.get.return_value = res
        return http

    def test_streams_to_disk(self, tmp_path):
        dest = tmp_path / 'out.bin'
        seen = []
        written = download('https://dl', str(dest), http=self._http(), on_chunk=seen.append)
        assert written == 4
        assert dest.read_bytes() == b'abcd'
        assert seen == [2, 2]

    def test_bad_status(self, tmp_path):
        with pytest.raises(ApiError, match='status 403'):
            download('https://dl', str(tmp_path / 'x'), http=self._http(status=403))

    def test_network_error(self, tmp_path):
        http = MagicMock()
        http.get.side_effect = requests.exceptions.ConnectionError('down')
        with pytest.raises(TransportError):
            download('https://dl', str(tmp_path / 'x'), http=http)

    def test_missing_directory(self, tmp_path):
        dest = tmp_path / 'nope' / 'f.bin'
        with pytest.raises(OioError, match='cannot write'):
            download('https://dl', str(dest), http=self._http())
        assert not dest.exists()

    def test_stream_cut_removes_partial_file(self, tmp_path):
        def chunks():
            yield b'ab'
            raise requests.exceptions.ChunkedEncodingError('connection broken')

        http = self._http()
        http.get.return_value.iter_content.return_value = chunks()
        dest = tmp_path / 'out.bin'

        with pytest.raises(TransportError) as exc:
            download('https://dl', str(dest), http=http)
        assert exc.value.kind == TransportError.CONNECTION_RESET
        assert not dest.exists()

    def test_bad_status_leaves_existing_file(self, tmp_path):
        dest = tmp_path / 'keep.txt'
        dest.write_text('mine')
        with pytest.raises(ApiError):
            download('https://dl', str(dest), http=self._http(status=404))
        assert dest.read_text() == 'mine'
