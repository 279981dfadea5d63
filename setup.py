from setuptools import setup

setup(
    name="tapereader",
    version="1.0.0",
    description=(
        "Buffered, callback based reader for tape files: extracts every record delimited by a start and an "
        "end marker while holding only a bounded window of the file in memory."
    ),
    packages=["tapereader", "tapereader.search"],
    python_requires=">=3.8",
    install_requires=["cffi>=1.15.0"],
    extras_require={"test": ["pytest"]},
)
