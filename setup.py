from setuptools import setup, find_packages

setup(
    name="idlekit",
    version="0.1.0",
    description="idlekit - data-driven idle/incremental game engine",
    author="Your Name",
    packages=find_packages(include=["idlekit_core", "idlekit_core.*", "idlekit_engine", "idlekit_engine.*"]),
    include_package_data=True,
    package_data={
        "idlekit_core": ["templates/*.yaml"],
    },
    install_requires=[
        # Core data modeling and validation
        "pydantic>=2.0.0",
        
        # Environment variables
        "python-dotenv>=1.0.0",
        
        # Graph analysis (logic graph lint)
        "networkx>=3.0",
        
        # CLI and rich output
        "typer>=0.9.0",
        "rich>=13.0.0",
        
        # YAML templates
        "pyyaml>=6.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "idlekit = idlekit_engine.cli:main",
        ],
    },
    python_requires=">=3.11",
    package_dir={"": "."},
)
