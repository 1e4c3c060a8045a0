"""Category modules; each exposes ``TABLE`` and ``dispatch(action, args)``."""
