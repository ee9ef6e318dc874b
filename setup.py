import codecs

import setuptools


def long_description():
    with codecs.open("README.md", encoding="utf8") as f:
        return f.read()


setuptools.setup(
    name="warren-gopher",
    version="0.1.0",
    license="MIT",
    description="A Gophermap Driven Gopher Server",
    install_requires=[
        "twisted>=20.3.0",
        "zope.interface",
    ],
    extras_require={
        "test": ["pytest"],
    },
    long_description=long_description(),
    long_description_content_type="text/markdown",
    packages=["warren", "warren.app"],
    py_modules=["warren_client"],
    entry_points={
        "console_scripts": [
            "warren=warren.__main__:main",
            "warren-client=warren_client:run_client",
        ]
    },
    python_requires=">=3.7",
    keywords="gopher server tcp gophermap twisted",
    classifiers=[
        "Environment :: No Input/Output (Daemon)",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Topic :: Internet",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
