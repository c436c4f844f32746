from setuptools import setup, find_packages

setup(
    name="nestedtree",
    version="0.1.0",
    packages=find_packages(),
    install_requires=[
        "setuptools",
        "pydantic>=2.0",
        "python-dotenv>=1.0.0",
        "SQLAlchemy>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
)
