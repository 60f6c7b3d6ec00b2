from setuptools import setup

setup(
    name="automata-engine",
    version="0.1.0",
    description="Regex compilation, subset construction, DFA minimization and simulation.",
    packages=["automata_engine"],
    python_requires=">=3.9",
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": ["automata-engine=automata_engine.cli:run"],
    },
)
