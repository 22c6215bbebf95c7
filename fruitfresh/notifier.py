"""Desktop notifications using notify-send."""

from __future__ import annotations

import shutil
import subprocess


class DesktopNotifier:
    """Show desktop notifications through the system notify-send command."""

    @staticmethod
    def is_supported() -> bool:
        return shutil.which("notify-send") is not None

    @staticmethod
    def notify(title: str, body: str = "") -> None:
        """Display a notification.

        Raises:
            RuntimeError: If notify-send is missing or fails.
        """
        if shutil.which("notify-send") is None:
            raise RuntimeError(
                "This system does not support desktop notifications "
                "(notify-send not found).\n"
                "  Ubuntu/Debian: sudo apt install libnotify-bin\n"
                "  Fedora/RHEL:   sudo dnf install libnotify"
            )

        cmd = ["notify-send", "--app-name=fruitfresh", title]
        if body:
            cmd.append(body)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=10,
            )
        except subprocess.TimeoutExpired:
            raise RuntimeError("Notification timed out.")
        if result.returncode != 0:
            raise RuntimeError(
                f"Notification failed: {result.stderr.strip()}"
            )
