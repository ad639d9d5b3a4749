from setuptools import find_packages, setup

DESCRIPTION = 'A Kubernetes operator for the Amazon CloudWatch Agent'
LONG_DESCRIPTION = """
Reconciles the AmazonCloudWatchAgent custom resources into the agent's
workloads, configs, services, ingresses, and autoscalers; prunes the orphaned
objects; reports the agent's health as the status and the K8s events.
""".strip()

PROJECT_URLS = {
    'Source Code': 'https://github.com/aws/amazon-cloudwatch-agent-operator',
}

setup(
    name='cwoperator',
    version='0.1.0',

    url=PROJECT_URLS['Source Code'],
    project_urls=PROJECT_URLS,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type='text/plain',
    keywords=['kubernetes', 'operator', 'cloudwatch', 'k8s'],
    license='Apache-2.0',
    classifiers = [
        'Intended Audience :: Developers',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: Apache Software License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
        'Programming Language :: Python :: 3 :: Only',
        'Programming Language :: Python :: Implementation :: CPython',
        'Topic :: System :: Monitoring',
    ],

    zip_safe=True,
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'cwoperator = cwoperator.cli:main',
        ],
    },

    python_requires='>=3.10',
    install_requires=[
        'typing_extensions',    # 0.20 MB
        'python-json-logger>=3.1',  # 0.05 MB
        'click',                # 0.60 MB
        'aiohttp',              # 7.80 MB
        'aiohttp>=3.9.0; python_version>="3.12"',
        'pyyaml',               # 0.90 MB
    ],
    extras_require={
        'dev': [
            'pytest',
            'pytest-asyncio',
            'pytest-mock',
            'aresponses',
        ],
    },
    package_data={"cwoperator": ["py.typed"]},
)
