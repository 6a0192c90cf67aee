from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="ec2-fleet-inventory",
    version="1.0.0",
    author="Your Organization",
    author_email="cloud-platform@your-org.com",
    description="Collect EC2 instance inventories across AWS accounts via cross-account roles",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/your-org/ec2-fleet-inventory",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "Topic :: System :: Systems Administration",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "boto3>=1.26.0",
        "botocore>=1.29.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
        "pandas>=1.5.0",
        "openpyxl>=3.1.0",
        "tabulate>=0.9.0",
        "colorlog>=6.7.0",
    ],
    extras_require={
        "dev": [
            "moto[ec2,sts]>=5.0.0",
            "pytest>=7.2.0",
            "pytest-cov>=4.0.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "ec2-inventory=ec2_inventory.cli:cli",
        ],
    },
)
