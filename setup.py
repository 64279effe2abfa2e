# setup.py
from setuptools import setup, find_packages

setup(
    name="quill-nrepl",
    version="0.3.0",
    description="nREPL server for the Quill Lisp runtime",
    packages=find_packages(include=["quill", "quill.*", "quill_nrepl", "quill_nrepl.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    entry_points={
        "console_scripts": ["quill-nrepl=quill_nrepl.__main__:main"],
    },
    zip_safe=False,
)
