import pytest

from mmui.core.table import (
    DEFAULT_PAGE_SIZE,
    Cell,
    SortDirection,
    Table,
    TableState,
    normalize,
    render_page,
    set_items_per_page,
    set_page,
    set_sort,
    sort_rows,
    total_pages,
    visible_rows,
)


def _people() -> Table:
    return Table(
        headers=("Name", "Age"),
        rows=[
            (Cell("Chris", "Chris"), Cell("25 years", 25)),
            (Cell("Alice", "Alice"), Cell("35 years", 35)),
            (Cell("Bob", "Bob"), Cell("20 years", 20)),
        ],
    )


def _names(rows) -> list[str]:
    return [row[0].renderable for row in rows]


def _numbered(count: int) -> Table:
    return Table(headers=("N",), rows=[(Cell(str(i), i),) for i in range(1, count + 1)])


def test_sort_by_name_then_by_age():
    table = _people()

    by_name = set_sort(TableState(), 0)
    assert _names(visible_rows(table, by_name)) == ["Alice", "Bob", "Chris"]

    by_age = set_sort(by_name, 1)
    assert by_age.sort_direction is SortDirection.ASC
    assert [row[1].renderable for row in visible_rows(table, by_age)] == [
        "20 years",
        "25 years",
        "35 years",
    ]


def test_set_sort_toggles_direction_on_same_column():
    first = set_sort(TableState(), 1)
    second = set_sort(first, 1)
    third = set_sort(second, 1)

    assert (first.sort_column, first.sort_direction) == (1, SortDirection.ASC)
    assert (second.sort_column, second.sort_direction) == (1, SortDirection.DESC)
    assert (third.sort_column, third.sort_direction) == (1, SortDirection.ASC)


def test_set_sort_on_other_column_restarts_ascending():
    state = set_sort(set_sort(TableState(), 0), 0)
    assert state.sort_direction is SortDirection.DESC

    state = set_sort(state, 1)
    assert (state.sort_column, state.sort_direction) == (1, SortDirection.ASC)


def test_sort_is_stable_in_both_directions():
    rows = [
        (Cell("b"), Cell(1)),
        (Cell("a"), Cell(2)),
        (Cell("b"), Cell(3)),
        (Cell("a"), Cell(4)),
    ]

    ascending = sort_rows(rows, 0, SortDirection.ASC)
    descending = sort_rows(rows, 0, SortDirection.DESC)

    assert [r[1].renderable for r in ascending] == [2, 4, 1, 3]
    assert [r[1].renderable for r in descending] == [1, 3, 2, 4]


def test_unsorted_rows_keep_input_order():
    assert _names(visible_rows(_people(), TableState())) == ["Chris", "Alice", "Bob"]


def test_sort_key_defaults_to_renderable():
    rows = [(Cell(3),), (Cell(1),), (Cell(2),)]
    assert [r[0].renderable for r in sort_rows(rows, 0, SortDirection.ASC)] == [1, 2, 3]


def test_missing_sort_keys_sort_last():
    rows = [(Cell(None),), (Cell(2),), (Cell(1),)]
    assert [r[0].renderable for r in sort_rows(rows, 0, SortDirection.ASC)] == [1, 2, None]


def test_sort_applies_to_all_rows_before_paging():
    table = Table(headers=("N",), rows=[(Cell(str(i), i),) for i in range(25, 0, -1)])
    state = set_items_per_page(set_sort(TableState(), 0), 10)

    first = visible_rows(table, state)
    third = visible_rows(table, set_page(state, 3, len(table.rows)))

    assert [r[0].sort_key for r in first] == list(range(1, 11))
    assert [r[0].sort_key for r in third] == list(range(21, 26))


@pytest.mark.parametrize(
    ("rows", "size", "expected"),
    [(0, 20, 1), (1, 20, 1), (20, 20, 1), (21, 20, 2), (45, 10, 5), (100, 100, 1)],
)
def test_total_pages(rows, size, expected):
    assert total_pages(rows, size) == expected


def test_total_pages_rejects_non_positive_size():
    with pytest.raises(ValueError, match="items_per_page"):
        total_pages(10, 0)


@pytest.mark.parametrize(("requested", "expected"), [(-5, 1), (0, 1), (1, 1), (3, 3), (99, 3)])
def test_set_page_clamps_to_existing_pages(requested, expected):
    assert set_page(TableState(), requested, 45).current_page == expected


def test_set_items_per_page_rejects_unknown_size():
    with pytest.raises(ValueError, match="items_per_page must be one of"):
        set_items_per_page(TableState(), 15)


def test_default_page_size():
    assert TableState().items_per_page == DEFAULT_PAGE_SIZE == 20


def test_growing_page_size_resets_to_first_page():
    table = _numbered(45)
    state = set_page(set_items_per_page(TableState(), 10), 5, len(table.rows))
    assert state.current_page == 5

    page = render_page(table, set_items_per_page(state, 50))

    assert page.page == 1
    assert page.total_pages == 1
    assert len(page.rows) == 45


def test_normalize_resets_page_when_data_shrinks():
    state = TableState(current_page=3, items_per_page=10)

    assert normalize(state, 25) == state
    assert normalize(state, 5).current_page == 1


def test_render_page_reports_totals():
    page = render_page(_numbered(45), TableState(current_page=3, items_per_page=20))

    assert page.page == 3
    assert page.total_pages == 3
    assert page.total_rows == 45
    assert [r[0].sort_key for r in page.rows] == [41, 42, 43, 44, 45]


def test_empty_table_renders_single_page():
    page = render_page(Table(headers=("N",)), TableState())

    assert page.rows == ()
    assert (page.page, page.total_pages) == (1, 1)


def test_table_rejects_rows_of_wrong_length():
    with pytest.raises(ValueError, match="one per header"):
        Table(headers=("Name", "Age"), rows=[(Cell("Alice"),)])


def test_clicking_name_then_age_headers():
    table = Table(
        headers=("Name", "Age"),
        rows=[
            (Cell("Chris", "Chris"), Cell("20 years", 20)),
            (Cell("Alice", "Alice"), Cell("35 years", 35)),
            (Cell("Bob", "Bob"), Cell("25 years", 25)),
        ],
    )

    by_name = set_sort(TableState(), 0)
    assert _names(visible_rows(table, by_name)) == ["Alice", "Bob", "Chris"]

    by_age = set_sort(by_name, 1)
    assert _names(visible_rows(table, by_age)) == ["Chris", "Bob", "Alice"]
