# tests/test_items.py

import codecs
from dataclasses import replace
from datetime import datetime

import pytest

from burpsuite_kit.http_history import (
    Item,
    ItemHostAttr,
    ItemRequestAttr,
    ItemResponseAttr,
    Items,
)
from burpsuite_kit.core.config import Settings
from burpsuite_kit.exceptions import ItemUnexpectedEofError

from tests.fixtures.history_builder import HistoryBuilder


def _assert_get_item(item: Item, time: datetime) -> None:
    assert item.time == time
    assert item.url == "http://httpbin.org/get?foo=bar"
    assert item.host[0].ip == b"184.72.216.47"
    assert item.host[1] == "httpbin.org"
    assert item.port == 80
    assert item.protocol == "http"
    assert item.method == "GET"
    assert item.path == "/get?foo=bar"
    assert item.extension is None
    assert item.request[0].base64 is True
    assert item.request[1].startswith(b"R0VUIC")
    assert item.request[1].endswith(b"UNCg0K")
    assert item.status == 200
    assert item.response_length == 508
    assert item.mimetype == "JSON"
    assert item.response[0].base64 is True
    assert item.response[1].startswith(b"SFRUUC")
    assert item.response[1].endswith(b"Cn0K")
    assert item.comment is None


def _assert_post_item(item: Item, time: datetime) -> None:
    assert item.time == time
    assert item.url == "https://httpbin.org/post"
    assert item.host == (ItemHostAttr(ip=b"54.164.234.192"), "httpbin.org")
    assert item.port == 443
    assert item.protocol == "https"
    assert item.method == "POST"
    assert item.path == "/post"
    assert item.extension is None
    assert item.request[0] == ItemRequestAttr(base64=True)
    assert item.request[1].startswith(b"UE9TVC")
    assert item.request[1].endswith(b"YmFyIn0=")
    assert item.status == 200
    assert item.response_length == 614
    assert item.mimetype == "JSON"
    assert item.response[0] == ItemResponseAttr(base64=True)
    assert item.response[1].startswith(b"SFRUUC")
    assert item.comment is None


def test_v_1_7_36(history_v1_7_36):
    with Items.from_path(history_v1_7_36) as items:
        assert items.attr.burp_version == "1.7.36"
        assert items.attr.export_time == datetime(2021, 1, 6, 11, 27, 54)

        _assert_get_item(next(items), datetime(2021, 1, 6, 11, 26, 17))
        _assert_post_item(next(items), datetime(2021, 1, 6, 11, 27, 9))

        with pytest.raises(StopIteration):
            next(items)


def test_v_2020_12_1(history_v2020_12_1):
    with Items.from_path(history_v2020_12_1) as items:
        assert items.attr.burp_version == "2020.12.1"
        assert items.attr.export_time == datetime(2021, 1, 6, 11, 36, 18)

        _assert_get_item(next(items), datetime(2021, 1, 6, 11, 36, 3))
        _assert_post_item(next(items), datetime(2021, 1, 6, 11, 36, 6))

        with pytest.raises(StopIteration):
            next(items)


def test_small_read_chunks_give_same_items(history_v2020_12_1, small_chunks):
    with Items.from_path(history_v2020_12_1) as items:
        expected = list(items)
    with Items.from_path(history_v2020_12_1, settings=small_chunks) as items:
        assert list(items) == expected
    assert len(expected) == 2


def test_from_reader_accepts_open_stream(history_v2020_12_1):
    with history_v2020_12_1.open("rb") as fh:
        items = Items.from_reader(fh)
        assert [item.method for item in items] == ["GET", "POST"]


def test_from_path_closes_file(history_v2020_12_1):
    items = Items.from_path(history_v2020_12_1)
    handle = items._owned
    items.close()
    assert handle.closed
    items.close()


@pytest.mark.parametrize("count", [0, 1, 3, 25])
def test_yields_exactly_n_items(open_items, count):
    data = HistoryBuilder.document([HistoryBuilder.item() for _ in range(count)])
    items = open_items(data)
    assert len(list(items)) == count
    with pytest.raises(StopIteration):
        next(items)


def test_items_are_independent(open_items):
    first = HistoryBuilder.item(HistoryBuilder.fields(port="8080", comment="first"))
    second = HistoryBuilder.item(HistoryBuilder.fields(port="8443"))
    items = list(open_items(HistoryBuilder.document([first, second])))
    assert [i.port for i in items] == [8080, 8443]
    assert [i.comment for i in items] == ["first", None]


def test_fields_in_any_order(open_items):
    fields = list(reversed(HistoryBuilder.fields()))
    (item,) = open_items(HistoryBuilder.document([HistoryBuilder.item(fields)]))
    assert item.port == 80
    assert item.method == "GET"


def test_concrete_scenario(open_items):
    (item,) = open_items(HistoryBuilder.document([HistoryBuilder.item()]))
    assert item.url == "http://httpbin.org/get?foo=bar"
    assert item.port == 80
    assert item.protocol == "http"
    assert item.method == "GET"
    assert item.status == 200
    assert item.response_length == 508
    assert item.extension is None
    assert item.comment is None


def test_payload_bytes_pass_through_undecoded(open_items):
    fields = HistoryBuilder.fields(request="R0VUIC8gSFRUUC8xLjENCg0K")
    (item,) = open_items(HistoryBuilder.document([HistoryBuilder.item(fields)]))
    assert item.request == (ItemRequestAttr(base64=True), b"R0VUIC8gSFRUUC8xLjENCg0K")


def test_raw_payload_with_markup_characters(open_items):
    raw = "POST /a?x=1&y=<2> HTTP/1.1\r\nHost: example.com\r\n\r\n{\"k\": \"é\"}"
    fields = HistoryBuilder.with_attrs(
        HistoryBuilder.fields(request=raw), "request", {"base64": "false"}
    )
    (item,) = open_items(HistoryBuilder.document([HistoryBuilder.item(fields)]))
    assert item.request[0].base64 is False
    assert item.request[1] == raw.encode("utf-8")


@pytest.mark.parametrize("chunk_size", [1, 3, 64 * 1024])
def test_raw_payload_keeps_crlf(open_items, chunk_size):
    request = "GET / HTTP/1.1\r\nHost: a\r\n\r\n"
    response = "HTTP/1.1 204 No Content\r\n\r\n"
    fields = HistoryBuilder.fields(request=request, response=response)
    fields = HistoryBuilder.with_attrs(fields, "request", {"base64": "false"})
    fields = HistoryBuilder.with_attrs(fields, "response", {"base64": "false"})
    data = HistoryBuilder.document([HistoryBuilder.item(fields)])
    (item,) = open_items(data, settings=Settings(read_chunk_size=chunk_size))
    assert item.request[1] == b"GET / HTTP/1.1\r\nHost: a\r\n\r\n"
    assert item.response[1] == b"HTTP/1.1 204 No Content\r\n\r\n"


def test_private_use_characters_in_payload_are_kept(open_items):
    raw = "a\ue000\ue002b\ue000\rc\ue001\ue000"
    fields = HistoryBuilder.fields(request=raw)
    (item,) = open_items(HistoryBuilder.document([HistoryBuilder.item(fields)]))
    assert item.request[1] == raw.encode("utf-8")


def test_payload_bytes_in_declared_encoding(open_items):
    raw = "GET /caf\xe9 HTTP/1.1\r\n\r\n"
    fields = HistoryBuilder.with_attrs(
        HistoryBuilder.fields(request=raw, comment="d\xe9j\xe0 vu"), "request", {"base64": "false"}
    )
    data = HistoryBuilder.document([HistoryBuilder.item(fields)], encoding="ISO-8859-1")
    assert b"caf\xe9" in data

    (item,) = open_items(data)
    assert item.request[1] == b"GET /caf\xe9 HTTP/1.1\r\n\r\n"
    assert item.comment == "d\xe9j\xe0 vu"


def test_utf16_export_with_byte_order_mark(open_items):
    raw = "GET / HTTP/1.1\r\n\r\n"
    fields = HistoryBuilder.with_attrs(
        HistoryBuilder.fields(request=raw), "request", {"base64": "false"}
    )
    text = HistoryBuilder.document_text([HistoryBuilder.item(fields)], encoding="UTF-16")
    data = codecs.BOM_UTF16_LE + text.encode("utf-16-le")

    (item,) = open_items(data)
    assert item.port == 80
    assert item.request[1] == raw.encode("utf-16-le")


def test_crlf_line_endings_between_elements(open_items):
    data = HistoryBuilder.document([HistoryBuilder.item(), HistoryBuilder.item()])
    items = list(open_items(data.replace(b"\n", b"\r\n")))
    assert len(items) == 2
    assert items[0].request[1] == b"R0VUIC8gSFRUUC8xLjENCg0K"


def test_str_shows_mimetype_as_written(open_items):
    (item,) = open_items(HistoryBuilder.document([HistoryBuilder.item()]))
    assert str(item).endswith("MIME: JSON")
    assert str(replace(item, mimetype="")).endswith("MIME: ")


@pytest.mark.parametrize(
    "text, expected",
    [("null", None), ("json", "json"), ("NULL", "NULL"), (None, "")],
)
def test_extension_sentinel(open_items, text, expected):
    fields = HistoryBuilder.fields(extension=text)
    (item,) = open_items(HistoryBuilder.document([HistoryBuilder.item(fields)]))
    assert item.extension == expected


@pytest.mark.parametrize("text, expected", [(None, None), ("checked", "checked")])
def test_comment_empty_is_absent(open_items, text, expected):
    fields = HistoryBuilder.fields(comment=text)
    (item,) = open_items(HistoryBuilder.document([HistoryBuilder.item(fields)]))
    assert item.comment == expected


def test_missing_root_close_still_ends_cleanly(open_items):
    data = HistoryBuilder.document([HistoryBuilder.item()], close_root=False)
    items = open_items(data)
    assert len(list(items)) == 1


def test_truncated_record_raises_once(open_items):
    data = HistoryBuilder.document([HistoryBuilder.item(), HistoryBuilder.item()])
    cut = data.rindex(b"<status>")
    items = open_items(data[:cut])

    assert isinstance(next(items), Item)
    with pytest.raises(ItemUnexpectedEofError):
        next(items)
    assert items.is_eof
    for _ in range(3):
        with pytest.raises(StopIteration):
            next(items)


def test_truncated_inside_tag_raises_once(open_items):
    data = HistoryBuilder.document([HistoryBuilder.item()])
    items = open_items(data[: data.index(b"<port>") + 3])
    with pytest.raises(ItemUnexpectedEofError):
        next(items)
    assert list(items) == []


def test_next_item_reports_eof_between_records(open_items):
    items = open_items(HistoryBuilder.document([]))
    with pytest.raises(ItemUnexpectedEofError):
        items.next_item()


def test_iter_results_ends_with_single_error(open_items):
    data = HistoryBuilder.document([HistoryBuilder.item(), HistoryBuilder.item()])
    items = open_items(data[: data.rindex(b"<port>")])
    results = list(items.iter_results())
    assert isinstance(results[0], Item)
    assert isinstance(results[1], ItemUnexpectedEofError)
    assert len(results) == 2


def test_iter_results_clean_stream(open_items):
    data = HistoryBuilder.document([HistoryBuilder.item()])
    results = list(open_items(data).iter_results())
    assert len(results) == 1
    assert isinstance(results[0], Item)

