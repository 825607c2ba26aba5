from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from cpancli.__main__ import main


@pytest.mark.unit
class TestMain:
    """Tests for main() entry point function."""

    @pytest.mark.parametrize(
        "exit_code",
        [0, 2, 6, 130],
        ids=["success", "usage", "module-failed", "interrupted"],
    )
    def test_main_returns_cli_exit_code(self, exit_code: int) -> None:
        """Test main returns exit code from cli_main."""
        mock_cli_module = MagicMock()
        mock_cli_module.main = MagicMock(return_value=exit_code)

        with patch.dict("sys.modules", {"cpancli.cli": mock_cli_module}):
            result = main()

        assert result == exit_code
        mock_cli_module.main.assert_called_once()

    def test_main_calls_cli_main_without_arguments(self) -> None:
        """Test main lets cli_main read sys.argv itself."""
        mock_cli_module = MagicMock()
        mock_cli_module.main = MagicMock(return_value=0)

        with patch.dict("sys.modules", {"cpancli.cli": mock_cli_module}):
            main()

        mock_cli_module.main.assert_called_once_with()
