"""Streamlit entry point for the Invoicy estimate form.

Run with ``streamlit run main.py``. Settings are read from the environment
(and a local ``.env`` file); see ``invoicy.config.load_config``.
"""
from __future__ import annotations

from invoicy.app import main

if __name__ == "__main__":
    main()
