#!/usr/bin/env python3
"""
NES APU Pulse Modulation Core - Setup Script

Pythonパッケージ設定ファイル
"""

from setuptools import setup, find_packages
import os

# README.mdを読み込み
def read_readme():
    readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
    if os.path.exists(readme_path):
        with open(readme_path, 'r', encoding='utf-8') as f:
            return f.read()
    return "NES APU pulse channel modulation core - sweep unit, envelope generator and divider"

# 依存関係を定義
INSTALL_REQUIRES = [
    'numpy>=1.19.0',
    'matplotlib>=3.3.0',
]

EXTRAS_REQUIRE = {
    'dev': [
        'pytest>=6.0.0',
        'pytest-cov>=2.10.0',
    ],
}

setup(
    # パッケージ基本情報
    name='pynesapu',
    version='1.0.0',
    description='NES APU pulse channel modulation core - sweep unit, envelope generator and divider',
    long_description=read_readme(),
    long_description_content_type='text/markdown',

    # ライセンス
    license='MIT',

    # 分類
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: Multimedia :: Sound/Audio',
        'Topic :: System :: Emulators',
    ],

    # キーワード
    keywords='nes apu 2a03 pulse sweep envelope emulator',

    # パッケージ構成
    packages=find_packages(exclude=['tests*', 'docs*', 'examples*']),
    python_requires='>=3.8',

    # 依存関係
    install_requires=INSTALL_REQUIRES,
    extras_require=EXTRAS_REQUIRE,

    # エントリーポイント
    entry_points={
        'console_scripts': [
            'pynesapu-demo=pynesapu.cli:demo_main',
            'pynesapu-plot=pynesapu.cli:plot_main',
        ],
    },

    zip_safe=False,
)
