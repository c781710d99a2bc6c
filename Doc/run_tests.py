#!/usr/bin/env python
"""
Test runner script for the whole suite
Usage: python Doc/run_tests.py [app ...]   (or: python manage.py test / pytest)
"""
import os
import sys
from pathlib import Path

import django
from django.conf import settings
from django.test.utils import get_runner

APPS = [
    'bizpanel.core',
    'bizpanel.catalog',
    'bizpanel.parties',
    'bizpanel.orders',
    'bizpanel.reports',
]

if __name__ == "__main__":
    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'bizpanel.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    failures = test_runner.run_tests(sys.argv[1:] or APPS)
    sys.exit(bool(failures))
