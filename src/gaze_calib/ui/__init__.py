from .console import ConsoleView

__all__ = ["ConsoleView"]
