from setuptools import setup, find_packages

setup(
    name='babblebear',
    version='0.3',
    description='Parent dashboard service for infant babble recordings and scores',
    license='new BSD',
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        'numpy',
        'librosa',
        'requests',
        'fastapi',
        'uvicorn',
        'python-multipart',
    ],
    extras_require={
        'capture': ['sounddevice', 'soundfile'],
        'test': ['pytest', 'httpx'],
    },
    tests_require=['pytest', 'httpx'],
    entry_points={
        'console_scripts': [
            'babblebear=babblebear.dashboard.cli:main',
            'babblebear-api=babblebear.dashboard.api:main',
        ],
    },
    scripts=[],
    include_package_data=True,
    zip_safe=False
)
