"""Built-in CLI sub-command groups for deckinventory.

* :mod:`~deckinventory.commands.config` -- view and modify global settings.
"""
