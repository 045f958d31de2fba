from setuptools import setup, find_packages

# Read the contents of README.md for the long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Define the requirements
requirements = [
    "click>=8.1.7",
    "pydantic>=2.0",
    "python-dotenv>=1.0.0",
    "requests>=2.31.0",
    "rich>=13.8.1",
]

test_requirements = [
    "pytest>=8.3.2",
]

setup(
    name="pricetoml",
    version="0.1.0",
    description="Converts the LiteLLM and models.dev price catalogs into a deterministic TOML price table",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=requirements,
    extras_require={"test": test_requirements},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Environment :: Console",
    ],
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "pricetoml=pricetoml.cli:cli",
        ],
    },
    include_package_data=True,
    keywords=[
        "litellm",
        "models.dev",
        "llm pricing",
        "toml",
        "CLI",
    ],
    license="MIT",
)
