# placement/core/context.py

import contextvars

table_id_ctx = contextvars.ContextVar("table_id", default=None)
pass_id_ctx = contextvars.ContextVar("pass_id", default=None)
