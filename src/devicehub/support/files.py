import os
import tempfile


def write_atomic(path, data):
    """
    Writes data to path through a temporary file in the same directory, which replaces
    path once it is complete. Readers of path see either the old content or all of data.
    """
    if not path:
        raise ValueError("path must not be empty")
    directory = os.path.dirname(os.path.abspath(path))
    fd, temp_path = tempfile.mkstemp(dir=directory, prefix='.' + os.path.basename(path) + '-', suffix='.tmp')
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.replace(temp_path, path)
    except BaseException:
        os.unlink(temp_path)
        raise


def read_bytes(path):
    with open(path, 'rb') as f:
        return f.read()
