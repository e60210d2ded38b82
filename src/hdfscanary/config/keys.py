"""Hadoop configuration keys and fixed values used while merging configuration."""

FS_DEFAULT_NAME_KEY = "fs.defaultFS"
HADOOP_SECURITY_AUTHENTICATION = "hadoop.security.authentication"
DFS_NAMENODE_USER_NAME_KEY = "dfs.namenode.kerberos.principal"
FS_AUTOMATIC_CLOSE_KEY = "fs.automatic.close"
FS_FILE_IMPL_KEY = "fs.file.impl"
HADOOP_TREAT_SUBJECT_EXTERNAL_KEY = "hadoop.treat.subject.external"

RAW_LOCAL_FILE_SYSTEM = "org.apache.hadoop.fs.RawLocalFileSystem"
NAMENODE_PRINCIPAL_TEMPLATE = "hdfs/_HOST@{realm}"

CORE_SITE_XML = "core-site.xml"
HDFS_SITE_XML = "hdfs-site.xml"
SITE_FILES = (CORE_SITE_XML, HDFS_SITE_XML)

SCHEME_SEPARATOR = "://"
