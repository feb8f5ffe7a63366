from __future__ import annotations

from bashcodeshift.cli import app

if __name__ == '__main__':
    app(prog_name='bashcodeshift')
