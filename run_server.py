import sys

if sys.version_info[:2] < (3, 9):
    print('Python 3.9 or later is required to run the world server.')
    sys.exit(1)

missing_deps_text = ''
missing_deps: list[str] = []

for (module, description, requirement) in [
    ('colorama', 'Colorama', 'colorama'),
    ('opensimplex', 'OpenSimplex Noise', 'opensimplex>=0.4'),
    ('numpy', 'NumPy', 'numpy'),
    ('humanize', 'Humanizer', 'humanize'),
    ('typing_extensions', 'typing_extensions', 'typing_extensions>=4.1.0'),
]:
    try:
        __import__(module)
    except ModuleNotFoundError:
        missing_deps_text += f' - {description} ({requirement})\n'
        missing_deps.append(requirement)

if missing_deps:
    print('You appear to be missing the following requirements for this server to run:')
    print(missing_deps_text, end='')
    print('Install them with:', sys.executable, '-m pip install -U', ' '.join(missing_deps))
    sys.exit(1)

from voxelworld.server.main import main
main()
