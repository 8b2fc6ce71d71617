from setuptools import setup, find_packages

setup(
    name="bmgraph",
    version="0.1.0",
    description="Reader, model and writer for the bmgraph graph format",
    packages=find_packages(include=["bmgraph", "bmgraph.*"]),
    install_requires=[
        "requests>=2.25.0",
        "numpy>=1.20",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": ["bmgraph=bmgraph.__main__:main"],
    },
    python_requires=">=3.8",
    zip_safe=False,
)
