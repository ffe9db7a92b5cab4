"""Tests for the directory picker, driven through textual's test pilot."""

import asyncio

from terminaut.tui import PickerApp


def run_picker(app, *keys):
    async def _run():
        async with app.run_test() as pilot:
            await pilot.pause()
            for key in keys:
                await pilot.press(key)
            await pilot.pause()
    asyncio.run(_run())
    return app


def test_lists_favorites_then_recents(store, tmp_path):
    fav, recent = tmp_path / "fav", tmp_path / "recent"
    store.add_favorite(str(fav))
    store.touch_recent(str(recent))
    store.touch_recent(str(fav))

    app = PickerApp(store=store, start_dir=str(tmp_path))
    assert app.rows() == [("★", "fav", str(fav)), ("", "recent", str(recent))]


def test_enter_selects_and_touches_recent(store, tmp_path):
    target = tmp_path / "fav"
    target.mkdir()
    store.add_favorite(str(target))

    app = run_picker(PickerApp(store=store, start_dir=str(tmp_path)), "enter")

    assert app.return_value == str(target)
    assert store.list_recents()[0].path == str(target)


def test_typing_searches_under_start_dir(store, tmp_path):
    start = tmp_path / "start"
    (start / "projects").mkdir(parents=True)
    (start / "docs").mkdir()
    app = PickerApp(store=store, start_dir=str(start))

    async def _run():
        async with app.run_test() as pilot:
            await pilot.pause()
            for key in "proj":
                await pilot.press(key)
            # The search runs in a worker thread
            await app.workers.wait_for_complete()
            await pilot.pause()
            await pilot.press("enter")
            await pilot.pause()
    asyncio.run(_run())

    assert app.return_value == str(start / "projects")


def test_clearing_filter_shows_favorites_again(store, tmp_path):
    fav = tmp_path / "fav"
    (tmp_path / "projects").mkdir()
    store.add_favorite(str(fav))
    app = PickerApp(store=store, start_dir=str(tmp_path))
    seen = {}

    async def _run():
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("p", "r")
            await app.workers.wait_for_complete()
            await pilot.pause()
            seen["search"] = app._path_at_cursor()
            await pilot.press("backspace", "backspace")
            await pilot.pause()
            seen["cleared"] = app._path_at_cursor()
    asyncio.run(_run())

    assert seen == {"search": str(tmp_path / "projects"), "cleared": str(fav)}


def test_toggle_favorite(store, tmp_path):
    target = tmp_path / "somewhere"
    store.touch_recent(str(target))

    run_picker(PickerApp(store=store, start_dir=str(tmp_path)), "ctrl+f", "escape")

    assert store.list_favorites() == [str(target)]
