"""
Unit tests for CLI commands.

Tests the command-line interface for account and token operations.
"""
import pytest
from unittest.mock import patch, MagicMock
from sqlalchemy.orm import Session

from app.cli import create_user, issue_token, main
from app.models.session import Session as UserSession
from app.models.user import User


# =============================================================================
# create_user Tests
# =============================================================================

class TestCreateUser:
    """Tests for the create_user function."""

    def test_create_user_success(self, db: Session):
        """Test successful user creation."""
        with patch('app.cli.SessionLocal', return_value=db), \
             patch('builtins.print') as mock_print:

            create_user("drinker@test.com", "securepassword123", name="Drinker")

            user = db.query(User).filter(User.email == "drinker@test.com").first()
            assert user is not None
            assert user.name == "Drinker"

            mock_print.assert_called_with("User created successfully: drinker@test.com")

    def test_create_user_email_normalized(self, db: Session):
        """Test that email is normalized to lowercase."""
        with patch('app.cli.SessionLocal', return_value=db), \
             patch('builtins.print'):

            create_user("Drinker@Test.COM", "password123")

            user = db.query(User).filter(User.email == "drinker@test.com").first()
            assert user is not None

    def test_create_user_duplicate_email(self, db: Session, test_user):
        """Test error when email already exists."""
        with patch('app.cli.SessionLocal', return_value=db), \
             patch('builtins.print') as mock_print, \
             pytest.raises(SystemExit) as exc_info:

            create_user(test_user.email, "newpassword123")

        assert exc_info.value.code == 1
        assert "already exists" in str(mock_print.call_args)

    def test_create_user_password_too_short(self, db: Session):
        """Test error when password is too short."""
        with patch('app.cli.SessionLocal', return_value=db), \
             patch('builtins.print') as mock_print, \
             pytest.raises(SystemExit) as exc_info:

            create_user("short@test.com", "short")

        assert exc_info.value.code == 1
        assert "at least 8 characters" in str(mock_print.call_args)

    def test_create_user_prompts_for_password(self, db: Session):
        """Test that password is prompted if not provided."""
        with patch('app.cli.SessionLocal', return_value=db), \
             patch('getpass.getpass', side_effect=["password123", "password123"]), \
             patch('builtins.print'):

            create_user("prompttest@test.com")

            user = db.query(User).filter(User.email == "prompttest@test.com").first()
            assert user is not None

    def test_create_user_password_mismatch(self, db: Session):
        """Test error when password confirmation doesn't match."""
        with patch('app.cli.SessionLocal', return_value=db), \
             patch('getpass.getpass', side_effect=["password123", "different456"]), \
             patch('builtins.print') as mock_print, \
             pytest.raises(SystemExit) as exc_info:

            create_user("mismatch@test.com")

        assert exc_info.value.code == 1
        assert "do not match" in str(mock_print.call_args)

    def test_create_user_password_hash_is_valid(self, db: Session):
        """Test that password is properly hashed."""
        import bcrypt

        with patch('app.cli.SessionLocal', return_value=db), \
             patch('builtins.print'):

            create_user("hashtest@test.com", "password123")

            user = db.query(User).filter(User.email == "hashtest@test.com").first()
            assert bcrypt.checkpw(
                "password123".encode('utf-8'),
                user.password_hash.encode('utf-8')
            )


# =============================================================================
# issue_token Tests
# =============================================================================

class TestIssueToken:
    """Tests for the issue_token function."""

    def test_issue_token_prints_session_token(self, db: Session, test_user):
        user_id = test_user.id

        with patch('app.cli.SessionLocal', return_value=db), \
             patch('builtins.print') as mock_print:

            issue_token(test_user.email, "testpassword123")

            token = mock_print.call_args[0][0]
            session = db.query(UserSession).filter(UserSession.token == token).first()
            assert session is not None
            assert session.user_id == user_id
            assert session.user_agent == "hydrobuddy-cli"

    def test_issue_token_wrong_password(self, db: Session, test_user):
        with patch('app.cli.SessionLocal', return_value=db), \
             patch('builtins.print') as mock_print, \
             pytest.raises(SystemExit) as exc_info:

            issue_token(test_user.email, "wrongpassword")

        assert exc_info.value.code == 1
        mock_print.assert_called_with("Error: Invalid email or password.")

    def test_issue_token_unknown_email(self, db: Session):
        with patch('app.cli.SessionLocal', return_value=db), \
             patch('builtins.print'), \
             pytest.raises(SystemExit) as exc_info:

            issue_token("nobody@test.com", "password123")

        assert exc_info.value.code == 1


# =============================================================================
# main() Tests
# =============================================================================

class TestMain:
    """Tests for the main CLI entry point."""

    def test_main_create_user(self, db: Session):
        """Test main with create-user command."""
        with patch('app.cli.SessionLocal', return_value=db), \
             patch('sys.argv', ['hydrobuddy', 'create-user', '--email', 'cli@test.com',
                                '--password', 'password123', '--name', 'CLI']), \
             patch('builtins.print'):

            main()

            user = db.query(User).filter(User.email == "cli@test.com").first()
            assert user is not None
            assert user.name == "CLI"

    def test_main_issue_token(self, db: Session, test_user):
        with patch('app.cli.SessionLocal', return_value=db), \
             patch('sys.argv', ['hydrobuddy', 'issue-token', '--email', test_user.email,
                                '--password', 'testpassword123']), \
             patch('builtins.print') as mock_print:

            main()

            assert len(mock_print.call_args[0][0]) > 20

    def test_main_no_command_shows_help(self):
        """Test that no command shows help and exits."""
        with patch('sys.argv', ['hydrobuddy']), \
             pytest.raises(SystemExit) as exc_info:

            main()

        assert exc_info.value.code == 1

    def test_main_unknown_command(self):
        """Test that unknown command shows error."""
        with patch('sys.argv', ['hydrobuddy', 'unknown-command']), \
             pytest.raises(SystemExit) as exc_info:

            main()

        # argparse returns exit code 2 for invalid arguments
        assert exc_info.value.code == 2

    def test_main_create_user_missing_email(self):
        """Test that missing email argument shows error."""
        with patch('sys.argv', ['hydrobuddy', 'create-user']), \
             pytest.raises(SystemExit):

            main()

    def test_main_help(self):
        """Test --help option."""
        with patch('sys.argv', ['hydrobuddy', '--help']), \
             pytest.raises(SystemExit) as exc_info:

            main()

        assert exc_info.value.code == 0


# =============================================================================
# Database Session Cleanup Tests
# =============================================================================

class TestDatabaseCleanup:
    """Tests for proper database session cleanup."""

    def test_session_closed_on_error(self, test_user):
        """Test that session is closed even when error occurs."""
        mock_session = MagicMock()
        mock_session.query.return_value.filter.return_value.first.return_value = test_user

        with patch('app.cli.SessionLocal', return_value=mock_session), \
             patch('builtins.print'), \
             pytest.raises(SystemExit):

            create_user(test_user.email, "password123")

        mock_session.close.assert_called_once()
