"""form_engine: configuration-driven evaluation forms.

Templates describe sections and fields; a ``FormSession`` tracks answers,
visibility, validation and derived scores while a reviewer fills them in.
"""

__version__ = "0.1.0"
