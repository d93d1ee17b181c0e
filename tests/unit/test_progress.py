from __future__ import annotations

from unittest.mock import MagicMock, patch

from bls_import.services.progress import ProgressTracker, is_tty_enabled


def test_is_tty_enabled_follows_stdout():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


def test_tracker_disabled_without_tty():
    with patch("bls_import.services.progress.is_tty_enabled", return_value=False):
        with ProgressTracker(3) as tracker:
            tracker.advance(matched=1)
            tracker.advance()
        assert tracker.pbar is None
        assert tracker.current_row == 2


def test_tracker_updates_tqdm_on_tty():
    fake_bar = MagicMock()
    with patch("bls_import.services.progress.is_tty_enabled", return_value=True):
        with patch("bls_import.services.progress.tqdm", return_value=fake_bar) as mock_tqdm:
            with ProgressTracker(2, description="Importing results") as tracker:
                tracker.advance(matched=1, recorded=2)
    kwargs = mock_tqdm.call_args.kwargs
    assert kwargs["total"] == 2
    assert kwargs["unit"] == "row"
    fake_bar.set_postfix.assert_called_once_with(matched=1, recorded=2)
    fake_bar.update.assert_called_once_with(1)
    fake_bar.close.assert_called_once()
    assert tracker.pbar is None
