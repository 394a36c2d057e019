"""
WSGI entry point for gunicorn (see gunicorn.conf.py).

gthread workers serve requests from several threads, so the first-call
initialization is serialized.
"""
from student_api.handler import EntryPoint
from student_api.lifecycle import ApplicationLifecycle

application = EntryPoint(ApplicationLifecycle(serialize_creation=True))
