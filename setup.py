from setuptools import setup, find_packages

setup(
    name="utilization-overview",
    version="1.0.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "python-dateutil>=2.8.0",
        "streamlit>=1.30.0",
        "pytest>=7.4.0",
    ],
    entry_points={
        "console_scripts": [
            "utilization-overview=utilization_view.cli:main",
        ],
    },
)
