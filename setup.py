"""
setup.py
"""

from setuptools import setup, find_packages

setup(
    name='pymvc',
    version='1.0.0',
    description='WSGI MVC framework with a request scoped view context and URI building for controller methods.',
    author='pymvc developers',
    license='Apache 2.0',
    packages=find_packages('src/'),
    package_dir={'': 'src'},
    install_requires=[
        "PyYAML",
        "gunicorn",
        "Werkzeug >= 2.3",
        "MarkupSafe",
        "click",
        "chevron",
        "pycryptodomex",
    ],
    extras_require={
        "test": ["pytest"],
    },
    zip_safe=False,
    classifiers=[
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    entry_points={
        "console_scripts": [
            "pymvc-routes=pymvc.scripts.pymvc_routes:list_routes",
            "pymvc-serve=pymvc.wsgi:main",
        ]
    }
)
