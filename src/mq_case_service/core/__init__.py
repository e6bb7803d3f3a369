"""Business logic: validation, identity lookup and the case lifecycle.

Import from the submodules directly (``core.case_manager``,
``core.identity_manager``); the persistence layer depends on
``core.exceptions`` so this package stays import-free.
"""
