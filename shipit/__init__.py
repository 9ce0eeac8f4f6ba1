"""shipit - dependency-ordered release targets with deploy and notify."""

__version__ = "0.1.0"
