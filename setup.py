"""Setup configuration for support_relay package."""

from setuptools import setup, find_packages
import os

# 读取 requirements.txt
def read_requirements():
    requirements_path = os.path.join(os.path.dirname(__file__), 'requirements.txt')
    with open(requirements_path, 'r', encoding='utf-8') as f:
        return [line.strip() for line in f if line.strip() and not line.startswith('#')]

# 读取 README (如果存在)
def read_readme():
    readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
    if os.path.exists(readme_path):
        with open(readme_path, 'r', encoding='utf-8') as f:
            return f.read()
    return "Support Relay - realtime support chat between anonymous clients and admins"

def get_packages():
    """Get all packages with support_relay prefix.

    Maps src/* to support_relay.* packages.
    For example: src/chat -> support_relay.chat
    """
    src_packages = find_packages(where='src')
    return ['support_relay'] + ['support_relay.' + p for p in src_packages]

setup(
    name="support-relay",
    version="0.1.0",
    author="Support Relay Team",
    author_email="",
    description="Realtime support chat relay between anonymous clients and admins",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    url="",
    # 将 src 目录映射为 support_relay 包
    package_dir={'support_relay': 'src'},
    packages=get_packages(),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=read_requirements(),
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-asyncio>=0.21.0',
            'httpx>=0.25.0',
            'black>=23.0.0',
            'flake8>=6.0.0',
        ],
        'test': [
            'pytest>=7.0.0',
            'pytest-asyncio>=0.21.0',
            'httpx>=0.25.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'support-relay-server=support_relay.app:main',
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
