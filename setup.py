from setuptools import setup, find_packages
from pathlib import Path

# Read README.md if available, otherwise use a short fallback description
readme_path = Path(__file__).parent / "README.md"
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")
else:
    long_description = "Compile regular expressions into minimized DFAs and render them as annotated Graphviz descriptions."

setup(
    name="rregex",
    version="0.3.0",
    description="Annotated automaton graph descriptions for regular expressions",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=[
        "networkx>=3.3",
        "pydot>=2.0",  # DOT parsing/rendering glue (requires graphviz for render)
        "pyformlang>=1.0.0",  # Regex -> epsilon-NFA -> NFA -> minimized DFA
        "pyyaml>=6.0",
        "pydantic>=2.0.0",
        "typer>=0.9.0",
    ],
    entry_points={
        "console_scripts": [
            "rregex=rregex.cli:main",
        ],
    },
    extras_require={
        "dev": [
            "pytest",
            "coverage",
            "hypothesis",
        ],
    },
)
