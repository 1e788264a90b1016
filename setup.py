from setuptools import setup, find_namespace_packages

setup(
    name="ovbox",
    version="0.1.0",
    description="Build, run and feed models to an OpenVINO-enabled Ollama container.",
    packages=find_namespace_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0",
        "click>=8.0",
        "python-dotenv>=1.0",
        "jinja2>=3.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
        # Provides the `modelscope` command line tool that ModelHubClient runs
        "hub": ["modelscope>=1.9.0"],
        "dev": ["black>=23.0"],
    },
    entry_points={
        "console_scripts": [
            "ovbox=ovbox.CLI.main:main",
        ],
    },
)
