from setuptools import setup
from tplkit.const import VERSION_STR, DESCRIPTION

setup(
    name="tplkit",
    version=VERSION_STR,
    python_requires='>=3.10',
    description=DESCRIPTION,
    packages=["tplkit"],
    install_requires=[
        "jinja2",
        "pyyaml",
        "requests",
    ],
    extras_require={
        "tests": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "tplkit = tplkit:main",
        ],
    },
    license="MIT",
    platforms="any",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
)
