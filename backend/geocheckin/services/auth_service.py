"""Authentication service for user management."""
from flask_jwt_extended import create_access_token, create_refresh_token
from geocheckin import db
from geocheckin.models.base import utcnow
from geocheckin.models.user import User, UserRole
from geocheckin.utils.validators import ValidationError, Validator

class AuthService:
    """Identity collaborator: credentials in, JWT subject out."""
    
    @staticmethod
    def create_user(email: str, password: str, name: str, role: str = 'student') -> User:
        """Create a user with a server-chosen role."""
        if not all([email, password, name]):
            raise ValidationError("Email, password and name are required")
        
        if not Validator.validate_email(email):
            raise ValidationError("Invalid email format")
        
        password_check = Validator.validate_password(password)
        if not password_check['is_valid']:
            raise ValidationError(password_check['errors'][0])
        
        name_check = Validator.validate_name(name)
        if not name_check['is_valid']:
            raise ValidationError(name_check['errors'][0])
        
        email = email.lower().strip()
        if User.query.filter_by(email=email).first():
            raise ValidationError("Email already exists")
        
        user = User(
            email=email,
            name=name.strip(),
            role=UserRole(role)
        )
        user.set_password(password)
        return user.save()
    
    @staticmethod
    def register_student(email: str, password: str, name: str) -> User:
        """Self-registration always yields a student account."""
        return AuthService.create_user(email, password, name, UserRole.STUDENT.value)
    
    @staticmethod
    def login(email: str, password: str) -> tuple[dict, str]:
        """Authenticate user and return tokens."""
        if not email or not password:
            return None, "Email and password are required"
        
        user = User.query.filter_by(email=email.lower().strip()).first()
        
        if not user:
            return None, "Invalid email or password"
        
        if not user.check_password(password):
            return None, "Invalid email or password"
        
        if not user.is_active:
            return None, "Account is deactivated"
        
        user.last_login = utcnow()
        db.session.commit()
        
        return {
            "access_token": create_access_token(identity=user.id),
            "refresh_token": create_refresh_token(identity=user.id),
            "user": user.to_dict()
        }, None
    
    @staticmethod
    def refresh_token(user_id: str) -> tuple[dict, str]:
        """Generate new access token."""
        user = db.session.get(User, user_id)
        if not user or not user.is_active:
            return None, "User not found or inactive"
        
        return {
            "access_token": create_access_token(identity=user.id),
            "user": user.to_dict()
        }, None
