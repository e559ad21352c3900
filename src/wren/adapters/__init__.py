"""Host adapters for third-party routers (``pip install wren[starlette]``)."""
