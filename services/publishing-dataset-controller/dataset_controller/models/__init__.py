from .dataset_models import (
    Link,
    ContactDetails,
    GeneralDetails,
    DatasetLinks,
    Dataset,
    DatasetUpdate,
    EditionLinks,
    Edition,
    Dimension,
    Alert,
    LatestChange,
    UsageNote,
    VersionLinks,
    Version,
    Instance,
    EditableMetadata,
)

from .collection_models import (
    CollectionItem,
    Collection,
)

from .topic_models import (
    TopicDescription,
    TopicResult,
    Topics,
    TopicsResult,
)

from .page_models import (
    DatasetListItem,
    EditionRow,
    EditionsPage,
    VersionRow,
    VersionsPage,
    TopicRow,
    EditMetadata,
    PutMetadataRequest,
    WriteResult,
)
