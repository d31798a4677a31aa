from trackmate.auth import TokenVerifier
from trackmate.cli import main
from trackmate.database import TrackmateRepository, create_database


def test_issue_token_and_export(tmp_path, capsys):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    assert main(['--database-url', url, 'init-db']) == 0
    assert main(['--database-url', url, 'issue-token', 'u1']) == 0
    token = capsys.readouterr().out.strip().splitlines()[-1]
    assert len(token) > 20

    out = tmp_path / 'laps.csv'
    assert main(['--database-url', url, 'export-laps', str(out), '--user', 'u1']) == 0
    assert out.exists()


def test_import_error_exit_code(tmp_path, capsys):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    code = main(['--database-url', url, 'import-laps', str(tmp_path / 'missing.csv'),
                 '--user', 'u1', '--track', 't1', '--car', 'c1'])
    assert code == 1
    assert 'Error:' in capsys.readouterr().err


def test_revoke_token(tmp_path, capsys):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    assert main(['--database-url', url, 'issue-token', 'u1']) == 0
    token = capsys.readouterr().out.strip().splitlines()[-1]

    assert main(['--database-url', url, 'revoke-token', token]) == 0
    assert 'Token revoked' in capsys.readouterr().out

    db_manager = create_database(url)
    try:
        assert TokenVerifier(TrackmateRepository(db_manager)).verify(token) is None
    finally:
        db_manager.close()

    assert main(['--database-url', url, 'revoke-token', 'never-issued']) == 1
    assert 'Token not found.' in capsys.readouterr().err
