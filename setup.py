"""
Setup script for shumoku: hierarchical network topology diagrams
"""

from setuptools import setup, find_packages

setup(
    name="shumoku",
    version="0.4.0",
    description="Hierarchical network topology diagrams with SVG rendering and zoom navigation",
    long_description="Resolves multi-file YAML network topologies into one graph, renders them as SVG/HTML and navigates between sheets by zooming",
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages(where="src", exclude=["tests*", "docs*", "examples*"]),
    python_requires=">=3.9",
    install_requires=[
        # Core dependencies
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "python-dotenv>=1.0.0",
        "PyYAML>=6.0",

        # Layout
        "numpy>=1.24.0",
        "networkx>=3.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-mock>=3.10.0",
            "black>=22.0.0",
            "isort>=5.10.0",
            "mypy>=1.0.0",
            "flake8>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "shumoku=shumoku.cli:main",
        ],
    },
    include_package_data=True,
    author="Shumoku Team",
    license="MIT",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "Topic :: System :: Networking",
        "Topic :: Multimedia :: Graphics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="network topology diagram svg yaml hierarchy",
)
