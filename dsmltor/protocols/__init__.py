"""LDAP and DSML protocol value conversion."""
