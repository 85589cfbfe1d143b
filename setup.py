from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="user-api-integration-tests",
    version="1.0.0",
    author="volkb79-2",
    description="Ordered integration tests and a mock server for a user-management REST API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    py_modules=["user_api_client"],
    packages=find_packages(include=["api_tests", "api_tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Testing",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    entry_points={
        "console_scripts": [
            "user-api-mock=api_tests.mock_user_api:main",
        ],
    },
)
