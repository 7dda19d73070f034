from setuptools import setup, find_namespace_packages

setup(
    name='lambda_tasks',
    version='0.1',
    package_dir={'': 'src'},
    packages=find_namespace_packages(where='src'),
    python_requires='>=3.9',
    install_requires=[
        'Click',
        'PyYAML',
        'pydantic>=2.5',
        'Jinja2',
        'boto3',
        'fastapi',
        'uvicorn',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-mock',
            'httpx',
        ],
    },
    entry_points='''
        [console_scripts]
        lambda-tasks=lambda_tasks.cli:cli
    ''',
)
