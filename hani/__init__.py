"""A terminal markdown editor with vim-like bindings and a rendered preview tab."""

__version__ = "1.2.6"