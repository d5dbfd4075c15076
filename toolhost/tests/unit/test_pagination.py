from toolhost.utils.pagination import MAX_COUNT, filter_items, paginate


def test_paginate_reports_next_window() -> None:
    page = paginate(range(10), offset=2, count=3)

    assert page.items == [2, 3, 4]
    assert page.total == 10
    assert page.has_more
    assert page.next_offset == 5


def test_paginate_last_page_has_no_next_offset() -> None:
    page = paginate(range(5), offset=3, count=10)

    assert page.items == [3, 4]
    assert not page.has_more
    assert page.next_offset is None


def test_paginate_clamps_bad_windows() -> None:
    assert paginate(range(3), offset=-4, count=0).items == [0, 1, 2]
    big = paginate(range(MAX_COUNT + 5), count=MAX_COUNT * 2)
    assert big.count == MAX_COUNT
    assert big.has_more


def test_filter_items_uses_glob_or_substring() -> None:
    names = ["echo", "server_info", "list_tool_names", "describe_tool"]

    assert filter_items(names, None, key=str) == names
    assert filter_items(names, "*", key=str) == names
    assert filter_items(names, "TOOL", key=str) == ["list_tool_names", "describe_tool"]
    assert filter_items(names, "*_TOOL", key=str) == ["describe_tool"]
    assert filter_items(names, "ech?", key=str) == ["echo"]
