from setuptools import setup, find_packages

setup(
    name="renscript",
    version="0.1.0",
    description="RenScript — scripting language compiler for 3D scene-graph objects",
    packages=find_packages(include=["renscript", "renscript.*"]),
    package_data={"renscript": ["data/*.yml"]},
    python_requires=">=3.10",
    install_requires=[
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "renscript=renscript.cli:main",
        ],
    },
)
